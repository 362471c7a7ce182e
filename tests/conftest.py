import os
import sys
from pathlib import Path


# Keep tests deterministic and local-only.
os.environ["JOBSYNC_SKIP_DOTENV"] = "1"
os.environ["JOBSYNC_API_URL"] = "http://testserver/api/v1"
os.environ["JOBSYNC_POLL_INTERVAL_MS"] = "20"
os.environ["JOBSYNC_REQUEST_TIMEOUT_SECONDS"] = "5"
os.environ["JOBSYNC_MAX_RETRIES"] = "2"
os.environ["JOBSYNC_ACCESS_TOKEN"] = ""
os.environ["JOBSYNC_MAX_EXTRACTIONS"] = "3"
os.environ["JOBSYNC_SANDBOX_SUGGESTION_QUOTA"] = "3"
os.environ["JOBSYNC_SANDBOX_EXTRACTION_QUOTA"] = "3"
os.environ["JOBSYNC_SANDBOX_STAGE_DELAY_MS"] = "0"

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import json

from jobsync import cli
from tests.fakes import FakeJobApi, make_snapshot


def test_once_prints_the_first_view_and_exits(monkeypatch, capsys):
    api = FakeJobApi(make_snapshot(title="Loft on Main", extracted_data={"Location": "Downtown"}))
    monkeypatch.setattr(cli, "build_job_api", lambda: api)

    exit_code = cli.main(["vid_1", "--once", "--interval", "0.1"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["job_id"] == "vid_1"
    assert payload["title"] == "Loft on Main"
    assert payload["status"] == "completed"
    assert api.fetch_calls[0] == "vid_1"


def test_render_fault_is_printed_instead_of_crashing(monkeypatch, capsys):
    api = FakeJobApi(make_snapshot())
    monkeypatch.setattr(cli, "build_job_api", lambda: api)

    def broken_view(state, *, max_extractions=3):
        raise KeyError("status")

    monkeypatch.setattr("jobsync.dependencies.build_job_view", broken_view)

    exit_code = cli.main(["vid_1", "--once"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["fault"]["key"] == "vid_1"
    assert payload["fault"]["error_type"] == "KeyError"
    assert payload["fault"]["reload_label"] == "RELOAD VIEW"

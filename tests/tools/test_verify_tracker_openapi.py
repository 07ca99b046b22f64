from tools import verify_tracker_openapi
from tools import generate_contract_cases


def test_consistent_tracker(tmp_path, write_openapi, write_tracker, capsys):
    spec = write_openapi({"paths": {"/health": {"get": {"x-activity-id": "DATA-00-002"}}}})
    write_tracker(["DATA-00-002"], name="tracker/school_erp_master_implementation_tracker_extended.xlsx")
    code = verify_tracker_openapi.main(["--spec", str(spec), "--tracker-dir", str(tmp_path / "tracker")])
    assert code == 0
    assert "consistent" in capsys.readouterr().out


def test_drift_is_reported_on_stderr(tmp_path, write_openapi, write_tracker, capsys):
    spec = write_openapi({"paths": {"/health": {"get": {"x-activity-id": "DATA-00-002"}}}})
    write_tracker(["SETUP-01-001"], name="tracker/school_erp_master_implementation_tracker.xlsx")
    code = verify_tracker_openapi.main(["--spec", str(spec), "--tracker-dir", str(tmp_path / "tracker")])
    assert code == 1
    err = capsys.readouterr().err
    assert "['SETUP-01-001']" in err
    assert "['DATA-00-002']" in err


def test_tracker_not_found(tmp_path, write_openapi, capsys):
    spec = write_openapi({"paths": {}})
    code = verify_tracker_openapi.main(["--spec", str(spec), "--tracker-dir", str(tmp_path / "tracker")])
    assert code == 2
    assert "Tracker file not found" in capsys.readouterr().err


def test_generate_contract_cases(tmp_path, sample_openapi_path):
    out = tmp_path / "generated.json"
    assert generate_contract_cases.main(["--spec", str(sample_openapi_path), "--out", str(out)]) == 0
    assert out.exists()

import pytest

from cosched import Err, Ok, RunResult


def test_ok_run_result():
    outcome = RunResult(Ok("done"), elapsed=0.25)

    assert outcome.is_ok and not outcome.is_err
    assert outcome.value == "done"
    assert outcome.error is None
    assert outcome.unwrap() == "done"
    assert outcome.display() == "Ok(value='done') in 0.250s"
    with pytest.raises(RuntimeError):
        outcome.unwrap_err()


def test_err_run_result():
    error = KeyError("k")
    outcome = RunResult(Err(error))

    assert outcome.is_err
    assert outcome.value is None
    assert outcome.error is error
    assert outcome.unwrap_err() is error
    with pytest.raises(KeyError):
        outcome.unwrap()

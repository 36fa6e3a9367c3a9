import pytest

from sparsepm import errors


def test_message_names_error_class():
    err = errors.NotFactorizedError()
    assert str(err).endswith("(sparsepm.errors.NotFactorizedError)")
    assert isinstance(err, errors.PowerMethodError)


def test_validation_error_lists_every_message():
    err = errors.ValidationError(["first problem", "second problem"], context="setup")
    assert err.messages == ["first problem", "second problem"]
    text = str(err)
    assert text.startswith("setup:")
    assert "- first problem" in text
    assert "- second problem" in text


def test_iteration_limit_error():
    err = errors.IterationLimitError(
        iteration=10, iteration_max=10, delta=2.5e-3, tolerance=1e-5
    )
    assert (err.iteration, err.iteration_max) == (10, 10)
    assert err.delta == 2.5e-3
    assert err.tolerance == 1e-5
    assert "iteration 10" in str(err)
    assert "delta 2.50000e-03" in str(err)
    assert "tolerance 1.00000e-05" in str(err)


@pytest.mark.parametrize(
    "kwargs,expected",
    [
        ({"up": 0.0, "down": 0.0}, "up = 0.0, down = 0.0"),
        ({"custom_msg": "collapsed"}, "collapsed"),
    ],
)
def test_numerical_breakdown_error(kwargs, expected):
    assert expected in str(errors.NumericalBreakdownError(**kwargs))


def test_internal_fault_error_keeps_trace():
    err = errors.InternalFaultError("Traceback: boom")
    assert err.trace == "Traceback: boom"
    assert "boom" in str(err)

from stepselect.exceptions import (
    ConfigurationError, EmptyModelError, FitError, InputContractError, StepselectError
)


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(InputContractError, StepselectError)
        assert issubclass(InputContractError, ValueError)
        assert issubclass(EmptyModelError, InputContractError)
        assert issubclass(FitError, StepselectError)
        assert not issubclass(FitError, ValueError)
        assert issubclass(ConfigurationError, StepselectError)

    def test_message_includes_details_and_cause(self):
        error = FitError("fit failed", details={'predictors': ['a']}, cause=ZeroDivisionError("boom"))

        text = str(error)

        assert text.startswith("fit failed")
        assert "['a']" in text
        assert "boom" in text

    def test_to_dict(self):
        error = InputContractError("bad input")

        assert error.to_dict() == {
            'type': 'InputContractError',
            'message': 'bad input',
            'details': {},
            'cause': None
        }

import pytest

from dbinitializer.errors import InitializerError
from dbinitializer.models import (
    ExecutionOutcome,
    InitializationSettings,
    Phase,
    RunResult,
    ScriptHandle,
    Statement,
)


def test_settings_defaults():
    settings = InitializationSettings()

    assert settings.ddl_locations == ()
    assert settings.dml_locations == ()
    assert settings.continue_on_error is False
    assert settings.separator == ";"
    assert settings.encoding == "utf-8"


def test_settings_are_immutable_and_normalize_locations():
    settings = InitializationSettings(ddl_locations=["a.sql", " b.sql "], dml_locations="c.sql")

    assert settings.ddl_locations == ("a.sql", "b.sql")
    assert settings.dml_locations == ("c.sql",)
    with pytest.raises(AttributeError):
        settings.separator = "GO"


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"separator": ""}, "separator"),
        ({"encoding": "no-such-codec"}, "Unknown script encoding"),
        ({"ddl_locations": ["ok.sql", ""]}, "ddl_locations"),
    ],
)
def test_settings_reject_invalid_values(kwargs, message):
    with pytest.raises(InitializerError, match=message):
        InitializationSettings(**kwargs)


def test_settings_from_mapping_accepts_aliases():
    settings = InitializationSettings.from_mapping(
        {
            "schema_locations": ["schema.sql"],
            "data_locations": ["data.sql"],
            "continue_on_error": True,
            "separator": None,
        }
    )

    assert settings.ddl_locations == ("schema.sql",)
    assert settings.dml_locations == ("data.sql",)
    assert settings.continue_on_error is True
    assert settings.separator == ";"


def test_statement_excerpt_is_flattened_and_truncated():
    handle = ScriptHandle("data.sql", lambda: b"")
    long_text = "INSERT INTO t VALUES\n   (" + ", ".join(str(n) for n in range(100)) + ")"

    statement = Statement(text=long_text, index=0, line=1, source=handle)

    assert "\n" not in statement.excerpt
    assert len(statement.excerpt) == 80
    assert statement.excerpt.endswith("...")
    assert Statement(text="SELECT  1", index=0, line=1, source=handle).excerpt == "SELECT 1"


def test_run_result_success_requires_done_state_and_no_failures():
    handle = ScriptHandle("data.sql", lambda: b"")
    statement = Statement(text="SELECT 1", index=0, line=1, source=handle)

    result = RunResult(state=Phase.DONE, succeeded=[statement])
    assert result.success is True
    assert result.statements_executed == 1
    result.raise_for_failure()

    result.failures.append(ExecutionOutcome.failed(statement, RuntimeError("boom")))
    assert result.success is False
    assert result.statements_executed == 2
    assert RunResult(state=Phase.ABORTED).success is False

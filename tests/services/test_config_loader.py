import pytest

from dbinitializer.errors import InitializerError
from dbinitializer.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".dbinitializer.yml"
    config_file.write_text(
        "ddl_locations:\n"
        "  - optional:db/schema.sql\n"
        "dml_locations: db/data.sql\n"
        "continue_on_error: true\n"
        "separator: GO\n"
        "psql_timeout: 45\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded["ddl_locations"] == ["optional:db/schema.sql"]
    assert loaded["dml_locations"] == ["db/data.sql"]
    assert loaded["continue_on_error"] is True
    assert loaded["separator"] == "GO"
    assert loaded["psql_timeout"] == 45


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".dbinitializer.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(InitializerError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_non_list_locations(tmp_path):
    config_file = tmp_path / ".dbinitializer.yml"
    config_file.write_text("ddl_locations:\n  a: b\n", encoding="utf-8")

    with pytest.raises(InitializerError, match="must be a list"):
        ConfigLoader().load(str(config_file))


def test_config_loader_handles_missing_and_empty_files(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")

    assert ConfigLoader().load(None) == {}
    assert ConfigLoader().load(str(empty)) == {}
    with pytest.raises(InitializerError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


@pytest.mark.parametrize("key", ["continue_on_error", "allow_insecure_http", "verbose"])
def test_config_loader_rejects_quoted_booleans(tmp_path, key):
    config_file = tmp_path / ".dbinitializer.yml"
    config_file.write_text(f'{key}: "false"\n', encoding="utf-8")

    with pytest.raises(InitializerError, match=f"'{key}' must be true or false"):
        ConfigLoader().load(str(config_file))

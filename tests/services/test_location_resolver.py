import pytest
import requests

from dbinitializer.errors import LocationNotFoundError
from dbinitializer.models import ScriptHandle
from dbinitializer.services.content_access import ContentAccessService
from dbinitializer.services.location_resolver import LocationResolver


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class FakeContentAccess:
    def __init__(self, scripts):
        self.scripts = scripts
        self.calls = []

    def open(self, location):
        self.calls.append(("open", location))
        return [ScriptHandle(name=name, opener=lambda: b"") for name in self.scripts.get(location, [])]


def test_resolve_preserves_input_order_and_sorts_handles_per_pattern():
    content = FakeContentAccess(
        {
            "db/schema/*.sql": ["db/schema/b.sql", "db/schema/a.sql"],
            "db/extra.sql": ["db/extra.sql"],
        }
    )
    resolver = LocationResolver(content, logger=DummyLogger())

    locations = resolver.resolve(["db/extra.sql", "db/schema/*.sql"])

    assert [loc.pattern for loc in locations] == ["db/extra.sql", "db/schema/*.sql"]
    assert [h.name for h in locations[1].handles] == ["db/schema/a.sql", "db/schema/b.sql"]


def test_resolve_skips_missing_optional_location():
    content = FakeContentAccess({"classpath:/schema.sql": ["schema.sql"]})
    resolver = LocationResolver(content, logger=DummyLogger())

    locations = resolver.resolve(["optional:classpath:/missing.sql", "classpath:/schema.sql"])

    assert len(locations) == 1
    assert locations[0].pattern == "classpath:/schema.sql"
    assert locations[0].optional is False
    assert content.calls == [("open", "classpath:/missing.sql"), ("open", "classpath:/schema.sql")]


def test_resolve_keeps_present_optional_location():
    content = FakeContentAccess({"data.sql": ["data.sql"]})
    resolver = LocationResolver(content, logger=DummyLogger())

    locations = resolver.resolve(["optional:data.sql"])

    assert locations[0].optional is True
    assert locations[0].pattern == "data.sql"


def test_resolve_raises_for_missing_required_location():
    content = FakeContentAccess({})
    resolver = LocationResolver(content, logger=DummyLogger())

    with pytest.raises(LocationNotFoundError, match="missing.sql") as exc_info:
        resolver.resolve(["missing.sql"])

    assert exc_info.value.location == "missing.sql"


def test_optional_prefix_is_case_sensitive_by_default():
    resolver = LocationResolver(FakeContentAccess({}), logger=DummyLogger())

    assert resolver.split_optional("OPTIONAL:a.sql") == ("OPTIONAL:a.sql", False)
    assert resolver.split_optional(" optional: a.sql ") == ("a.sql", True)


def test_optional_prefix_can_be_configured():
    resolver = LocationResolver(
        FakeContentAccess({}),
        logger=DummyLogger(),
        optional_prefix="maybe:",
        case_sensitive_prefix=False,
    )

    assert resolver.split_optional("MAYBE:a.sql") == ("a.sql", True)
    assert resolver.resolve(["Maybe:a.sql"]) == []


class OfflineRequests:
    RequestException = requests.RequestException

    def __init__(self):
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        raise requests.ConnectionError(f"cannot connect to {url}")


def test_unreachable_optional_url_is_skipped():
    offline = OfflineRequests()
    content = ContentAccessService(logger=DummyLogger(), requests_module=offline)
    resolver = LocationResolver(content, logger=DummyLogger())

    assert resolver.resolve(["optional:https://scripts.example.com/seed.sql"]) == []
    assert offline.calls == [
        ("HEAD", "https://scripts.example.com/seed.sql"),
        ("GET", "https://scripts.example.com/seed.sql"),
    ]


def test_unreachable_required_url_raises_location_not_found():
    content = ContentAccessService(logger=DummyLogger(), requests_module=OfflineRequests())
    resolver = LocationResolver(content, logger=DummyLogger())

    with pytest.raises(LocationNotFoundError) as exc_info:
        resolver.resolve(["https://scripts.example.com/schema.sql"])

    assert exc_info.value.location == "https://scripts.example.com/schema.sql"

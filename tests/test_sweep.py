"""
Tests for sweeping owned streams.
"""

import pytest

from streamwright.broker import StreamBroker
from streamwright.errors import ProviderError
from streamwright.models import StreamSpec

OWNED = {"application": "orders-svc", "cluster": "ecs-prod-1"}
FOREIGN = {"application": "billing-svc"}


@pytest.fixture
def broker(provider, build_log, ownership, settings):
    return StreamBroker(provider, build_log, ownership, settings)


def _tags(mapping):
    return lambda name: mapping[name]


def _deleted(provider):
    return [c.args[0] for c in provider.delete_stream.call_args_list]


class TestSweep:
    """Test deletion of undeclared owned streams."""

    def test_deletes_only_owned_undeclared(self, broker, provider, build_log):
        provider.list_stream_names.return_value = ["a", "b", "c"]
        provider.list_tags.side_effect = _tags({"a": OWNED, "b": OWNED, "c": FOREIGN})

        result = broker.sweep([StreamSpec("a", 1)])

        assert _deleted(provider) == ["b"]
        assert result.deleted == ["b"]
        assert result.kept == ["a"]
        assert result.succeeded
        assert "Deleted Stream b." in build_log.lines()

    def test_empty_desired_deletes_all_owned(self, broker, provider):
        provider.list_stream_names.return_value = ["a", "b", "c"]
        provider.list_tags.side_effect = _tags({"a": OWNED, "b": OWNED, "c": FOREIGN})

        result = broker.sweep([])

        assert _deleted(provider) == ["a", "b"]
        assert result.kept == []

    def test_none_desired_deletes_all_owned(self, broker, provider):
        provider.list_stream_names.return_value = ["a", "c"]
        provider.list_tags.side_effect = _tags({"a": OWNED, "c": FOREIGN})

        broker.sweep(None)

        assert _deleted(provider) == ["a"]

    def test_delete_failure_continues(self, broker, provider, build_log):
        provider.list_stream_names.return_value = ["b", "d"]
        provider.list_tags.side_effect = _tags({"b": OWNED, "d": OWNED})
        provider.delete_stream.side_effect = [ProviderError("ResourceInUseException"), None]

        result = broker.sweep([])

        assert _deleted(provider) == ["b", "d"]
        assert result.failed == ["b"]
        assert result.deleted == ["d"]
        assert not result.succeeded
        assert "Error deleting Stream b." in build_log.errors()
        assert "Deleted Stream b." not in build_log.lines()

    def test_explicit_owner_tag(self, broker, provider):
        provider.list_stream_names.return_value = ["a", "c"]
        provider.list_tags.side_effect = _tags({"a": OWNED, "c": FOREIGN})

        broker.sweep([], ("application", "billing-svc"))

        assert _deleted(provider) == ["c"]

    def test_tag_read_failure_skips_stream(self, broker, provider):
        tags = {"b": OWNED}

        def list_tags(name):
            if name == "a":
                raise ProviderError("AccessDeniedException")
            return tags[name]

        provider.list_stream_names.return_value = ["a", "b"]
        provider.list_tags.side_effect = list_tags

        result = broker.sweep([])

        assert result.skipped == ["a"]
        assert result.deleted == ["b"]

    def test_listing_failure(self, broker, provider, build_log):
        provider.list_stream_names.side_effect = ProviderError("AccessDeniedException")

        result = broker.sweep([])

        assert result.error == "AccessDeniedException"
        provider.delete_stream.assert_not_called()
        assert len(build_log.errors()) == 1

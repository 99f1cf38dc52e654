"""Tests for SharePoint session lifecycle."""

import pytest

from migration.config import SharePointConfig
from migration.exceptions import ConfigurationError
from migration.models import SessionFailed, SessionOpened
from migration.session import SessionFactory

from helpers import SITE_A, FakeSharePoint


def _factory(sharepoint, **overrides):
    settings = dict(
        auth_mode="certificate",
        tenant="contoso.onmicrosoft.com",
        client_id="client-id",
        thumbprint="AB12",
        cert_path="/certs/migration.pem",
        cert_passphrase=None,
        username=None,
        password=None,
    )
    settings.update(overrides)
    return SessionFactory(SharePointConfig(**settings), context_factory=sharepoint)


class TestOpen:
    def test_certificate_variant(self):
        sharepoint = FakeSharePoint()
        result = _factory(sharepoint).open(SITE_A)

        assert isinstance(result, SessionOpened)
        assert result.session.auth == "certificate"
        assert result.session.credential == ("contoso.onmicrosoft.com", "client-id", "AB12", "/certs/migration.pem")
        assert sharepoint.opened == [SITE_A]

    def test_delegated_variant(self):
        sharepoint = FakeSharePoint()
        result = _factory(
            sharepoint, auth_mode="delegated", username="svc-migration@contoso.com", password="secret"
        ).open(SITE_A)

        assert isinstance(result, SessionOpened)
        assert result.session.auth == "delegated"

    def test_auth_failure_returns_failed_result(self):
        sharepoint = FakeSharePoint(unreachable=[SITE_A])
        result = _factory(sharepoint).open(SITE_A)

        assert isinstance(result, SessionFailed)
        assert "401" in result.error
        assert result.address == SITE_A

    def test_unknown_auth_mode(self):
        with pytest.raises(ConfigurationError):
            _factory(FakeSharePoint(), auth_mode="interactive")


class TestClose:
    def test_close_failure_is_swallowed(self):
        sharepoint = FakeSharePoint(fail_close=True)
        factory = _factory(sharepoint)
        opened = factory.open(SITE_A)

        factory.close(opened)
        assert sharepoint.closed == [SITE_A]

    def test_close_none_is_noop(self):
        _factory(FakeSharePoint()).close(None)


class TestScopedSession:
    def test_closes_after_block(self):
        sharepoint = FakeSharePoint()
        with _factory(sharepoint).session(SITE_A) as opened:
            assert isinstance(opened, SessionOpened)
            assert sharepoint.closed == []
        assert sharepoint.closed == [SITE_A]

    def test_closes_when_block_raises(self):
        sharepoint = FakeSharePoint()
        with pytest.raises(RuntimeError):
            with _factory(sharepoint).session(SITE_A):
                raise RuntimeError("boom")
        assert sharepoint.closed == [SITE_A]

    def test_failed_open_is_not_closed(self):
        sharepoint = FakeSharePoint(unreachable=[SITE_A])
        with _factory(sharepoint).session(SITE_A) as opened:
            assert isinstance(opened, SessionFailed)
        assert sharepoint.closed == []

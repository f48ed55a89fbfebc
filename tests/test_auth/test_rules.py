"""Tests for the scheme rule table and pure classification."""

from __future__ import annotations

import pytest

from pkgnet.auth import AuthRequest, SchemeRule, classify, create_default_rules, is_public_bitbucket_download
from pkgnet.auth.rules import HttpBasicRule, select_rule
from pkgnet.models import AuthScheme, Credential


class TestClassify:
    @pytest.mark.parametrize(
        ("origin", "username", "password", "url", "expected"),
        [
            ("example.org", "tok", "bearer", "https://example.org/", AuthScheme.BEARER),
            ("github.com", "tok", "x-oauth-basic", "https://api.github.com/", AuthScheme.GITHUB_TOKEN),
            ("gitlab.com", "tok", "oauth2", "https://gitlab.com/", AuthScheme.GITLAB_OAUTH),
            ("gitlab.com", "tok", "private-token", "https://gitlab.com/", AuthScheme.GITLAB_PRIVATE_TOKEN),
            ("gitlab.com", "tok", "gitlab-ci-token", "https://gitlab.com/", AuthScheme.GITLAB_PRIVATE_TOKEN),
            (
                "bitbucket.org",
                "x-token-auth",
                "tok",
                "https://bitbucket.org/acme/lib/downloads/lib.zip",
                AuthScheme.NONE,
            ),
            ("bitbucket.org", "x-token-auth", "tok", "https://bitbucket.org/acme/lib", AuthScheme.BITBUCKET_OAUTH),
            (
                "bitbucket.org",
                "x-token-auth",
                "tok",
                "https://bitbucket.org/site/oauth2/access_token",
                AuthScheme.HTTP_BASIC,
            ),
            ("repo.example.org", "alice", "s3cret", "https://repo.example.org/", AuthScheme.HTTP_BASIC),
        ],
    )
    def test_table(
        self, origin: str, username: str, password: str, url: str, expected: AuthScheme
    ) -> None:
        credential = Credential(username=username, password=password)
        assert classify(origin, credential, url, gitlab_domains=["gitlab.com"]) == expected

    def test_gitlab_needs_configured_domain(self) -> None:
        credential = Credential(username="tok", password="oauth2")
        assert classify("gitlab.com", credential, "https://gitlab.com/") == AuthScheme.HTTP_BASIC

    def test_github_origin_counts_without_config(self) -> None:
        credential = Credential(username="tok", password="x-oauth-basic")
        assert classify("github.com", credential, "https://github.com/", github_domains=[]) == AuthScheme.GITHUB_TOKEN


class TestPublicBitbucketDownload:
    @pytest.mark.parametrize(
        "url",
        [
            "https://bitbucket.org/acme/lib/downloads/lib-1.0.zip",
            "https://api.bitbucket.org/acme/lib/downloads/lib-1.0.zip",
            "https://bbuseruploads.s3.amazonaws.com/abc/downloads/lib.zip?Signature=x",
        ],
    )
    def test_public(self, url: str) -> None:
        assert is_public_bitbucket_download(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://bitbucket.org/acme/lib/src/master/",
            "https://bitbucket.org/acme/downloads",
            "https://evilbitbucket.org/acme/lib/downloads/lib.zip",
            "https://example.org/acme/lib/downloads/lib.zip",
            "not a url",
            "http://[invalid",
        ],
    )
    def test_not_public(self, url: str) -> None:
        assert is_public_bitbucket_download(url) is False


class TestRuleTable:
    def test_default_order(self) -> None:
        schemes = [rule.scheme for rule in create_default_rules()]
        assert schemes == [
            AuthScheme.BEARER,
            AuthScheme.GITHUB_TOKEN,
            AuthScheme.GITLAB_OAUTH,
            AuthScheme.GITLAB_PRIVATE_TOKEN,
            AuthScheme.NONE,
            AuthScheme.BITBUCKET_OAUTH,
            AuthScheme.HTTP_BASIC,
        ]

    def test_custom_rules_fall_back_to_basic(self) -> None:
        request = AuthRequest(
            origin="example.org",
            url="https://example.org/",
            credential=Credential(username="alice", password="pw"),
        )
        assert isinstance(select_rule(request, []), HttpBasicRule)

    def test_custom_rule_takes_precedence(self) -> None:
        class ApiKeyRule(SchemeRule):
            @property
            def scheme(self) -> AuthScheme:
                return AuthScheme.BEARER

            def matches(self, request: AuthRequest) -> bool:
                return request.origin == "api.example.org"

            def header(self, credential: Credential):
                return f"X-Api-Key: {credential.username}"

        rule = ApiKeyRule()
        request = AuthRequest(
            origin="api.example.org",
            url="https://api.example.org/",
            credential=Credential(username="key", password="pw"),
        )
        assert select_rule(request, [rule, *create_default_rules()]) is rule
        assert repr(rule) == "<ApiKeyRule scheme=bearer>"

    def test_abstract_base_cannot_be_instantiated(self) -> None:
        with pytest.raises(TypeError):
            SchemeRule()  # type: ignore[abstract]

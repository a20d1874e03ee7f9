"""
Tests for the credential resolver.

Test coverage includes:
- Method selection priority (api_key > provider_id)
- Endpoint selection priority (api_url > region > default)
- Boundary values for credential and audience lengths
- Audience character set
"""
import logging

import pytest
from pydantic import SecretStr

from buddy_oidc_login.errors import ConfigError
from buddy_oidc_login.regions import DEFAULT_BASE_URL, REGIONS
from buddy_oidc_login.resolver import (
    MAX_AUDIENCE_LENGTH,
    MAX_CREDENTIAL_LENGTH,
    resolve,
    resolve_auth_method,
    resolve_endpoint,
    validate_audience,
    validate_provider_id,
    validate_static_key,
)
from buddy_oidc_login.types import (
    AuthInput,
    DefaultEndpoint,
    ExplicitUrl,
    FederatedExchange,
    Region,
    StaticKey,
)

PROVIDER_ID = "11111111-2222-4333-8444-555555555555"


class TestResolveAuthMethod:
    """Tests for authentication method selection."""

    def test_static_key_selected(self):
        """Should select StaticKey when only api_key is set."""
        method = resolve_auth_method(AuthInput(api_key=SecretStr("my-key")))
        assert isinstance(method, StaticKey)
        assert method.value.get_secret_value() == "my-key"

    def test_static_key_wins_over_provider_id(self, caplog):
        """Should prefer api_key when both api_key and provider_id are set."""
        with caplog.at_level(logging.INFO):
            method = resolve_auth_method(
                AuthInput(api_key=SecretStr("my-key"), provider_id=PROVIDER_ID)
            )
        assert isinstance(method, StaticKey)
        assert "using api_key" in caplog.text

    def test_federated_exchange_selected(self):
        """Should select FederatedExchange when only provider_id is set."""
        method = resolve_auth_method(AuthInput(provider_id=PROVIDER_ID, audience="buddy.works"))
        assert method == FederatedExchange(provider_id=PROVIDER_ID, audience="buddy.works")

    def test_audience_is_optional(self):
        """Should allow a missing audience."""
        method = resolve_auth_method(AuthInput(provider_id=PROVIDER_ID))
        assert method.audience is None

    def test_fails_without_any_method(self):
        """Should fail when neither api_key nor provider_id is set."""
        with pytest.raises(ConfigError) as exc_info:
            resolve_auth_method(AuthInput(region="EU"))
        assert "api_key or provider_id" in str(exc_info.value)

    def test_audience_not_validated_for_static_key(self):
        """Should ignore an invalid audience when a static key is used."""
        method = resolve_auth_method(AuthInput(api_key=SecretStr("k"), audience="bad value"))
        assert isinstance(method, StaticKey)


class TestValidateStaticKey:
    """Tests for validate_static_key."""

    def test_rejects_empty(self):
        """Should reject an empty key."""
        with pytest.raises(ConfigError):
            validate_static_key(SecretStr(""))

    def test_rejects_whitespace_only(self):
        """Should reject a whitespace-only key."""
        with pytest.raises(ConfigError):
            validate_static_key(SecretStr("   "))

    def test_accepts_max_length(self):
        """Should accept a key at the length limit."""
        key = "k" * MAX_CREDENTIAL_LENGTH
        assert validate_static_key(SecretStr(key)).value.get_secret_value() == key

    def test_rejects_over_max_length(self):
        """Should reject a key over the length limit."""
        with pytest.raises(ConfigError):
            validate_static_key(SecretStr("k" * (MAX_CREDENTIAL_LENGTH + 1)))

    def test_does_not_enforce_key_format(self):
        """Should accept keys that are not UUIDs."""
        assert validate_static_key(SecretStr("not_a_uuid!")).value.get_secret_value() == "not_a_uuid!"

    def test_does_not_log_key(self, caplog):
        """Should only log the masked key."""
        with caplog.at_level(logging.DEBUG):
            validate_static_key(SecretStr("supersecretkey"))
        assert "supersecretkey" not in caplog.text


class TestValidateProviderId:
    """Tests for validate_provider_id."""

    def test_accepts_uuid(self):
        """Should accept a UUID provider id."""
        assert validate_provider_id(PROVIDER_ID) == PROVIDER_ID

    def test_accepts_non_uuid(self):
        """Should leave format validation to the server."""
        assert validate_provider_id("provider-1") == "provider-1"

    def test_rejects_empty(self):
        """Should reject an empty provider id."""
        with pytest.raises(ConfigError):
            validate_provider_id("")

    def test_rejects_over_max_length(self):
        """Should reject a provider id over the length limit."""
        with pytest.raises(ConfigError):
            validate_provider_id("p" * (MAX_CREDENTIAL_LENGTH + 1))

    def test_warns_on_mixed_case_uuid(self, caplog):
        """Should warn on mixed-case UUIDs."""
        with caplog.at_level(logging.WARNING):
            validate_provider_id("AAAAAAAA-bbbb-4ccc-8ddd-eeeeeeeeeeee")
        assert "mixed case" in caplog.text

    def test_no_warning_on_upper_case_uuid(self, caplog):
        """Should not warn on fully upper-case UUIDs."""
        with caplog.at_level(logging.WARNING):
            validate_provider_id("AAAAAAAA-BBBB-4CCC-8DDD-EEEEEEEEEEEE")
        assert "mixed case" not in caplog.text


class TestValidateAudience:
    """Tests for validate_audience."""

    def test_none_is_allowed(self):
        """Should pass through None."""
        assert validate_audience(None) is None

    @pytest.mark.parametrize(
        "audience",
        [
            "buddy.works",
            "https://api.buddy.works/oidc?x=1#frag",
            "urn:buddy:aud",
            "a-b_c.d~e",
            "user@host!$&'()*+,;=",
        ],
    )
    def test_accepts_uri_safe(self, audience):
        """Should accept URI-safe audiences."""
        assert validate_audience(audience) == audience

    @pytest.mark.parametrize("audience", ["has space", "tab\there", "quote\"", "brace{", "pct%20", "ünicode"])
    def test_rejects_invalid_characters(self, audience):
        """Should reject characters outside the URI-safe set."""
        with pytest.raises(ConfigError) as exc_info:
            validate_audience(audience)
        assert "URI-safe" in str(exc_info.value)

    def test_rejects_trailing_newline(self):
        """Should not accept a newline after an otherwise valid audience."""
        with pytest.raises(ConfigError):
            validate_audience("buddy.works\n")

    def test_rejects_empty(self):
        """Should reject an empty audience."""
        with pytest.raises(ConfigError):
            validate_audience("")

    def test_accepts_max_length(self):
        """Should accept an audience at the length limit."""
        assert validate_audience("a" * MAX_AUDIENCE_LENGTH)

    def test_rejects_over_max_length(self):
        """Should reject an audience over the length limit."""
        with pytest.raises(ConfigError):
            validate_audience("a" * (MAX_AUDIENCE_LENGTH + 1))

    def test_invalid_audience_fails_resolution(self):
        """Should fail full resolution with a space in the audience."""
        with pytest.raises(ConfigError):
            resolve(AuthInput(provider_id=PROVIDER_ID, audience="my audience"))


class TestResolveEndpoint:
    """Tests for endpoint selection."""

    def test_explicit_url(self):
        """Should pass an explicit HTTPS URL through."""
        source = resolve_endpoint(AuthInput(api_url="https://buddy.example.com/api"))
        assert source == ExplicitUrl(url="https://buddy.example.com/api")

    def test_explicit_url_kept_verbatim(self):
        """Should keep the URL as given, trailing slash included."""
        source = resolve_endpoint(AuthInput(api_url="https://buddy.example.com/"))
        assert source.url == "https://buddy.example.com/"

    def test_resolved_endpoint_keeps_trailing_slash(self):
        """Should export the explicit URL unchanged."""
        config = resolve(AuthInput(provider_id="p", api_url="https://buddy.example.com/"))
        assert config.endpoint == "https://buddy.example.com/"

    def test_explicit_url_wins_over_region(self):
        """Should prefer api_url over region."""
        source = resolve_endpoint(AuthInput(api_url="https://buddy.example.com", region="EU"))
        assert isinstance(source, ExplicitUrl)

    def test_explicit_url_wins_over_invalid_region(self):
        """Should ignore region entirely once api_url is taken."""
        source = resolve_endpoint(AuthInput(api_url="https://buddy.example.com", region="MARS"))
        assert isinstance(source, ExplicitUrl)

    @pytest.mark.parametrize(
        "api_url",
        [
            "http://api.buddy.works",
            "ftp://api.buddy.works",
            "api.buddy.works",
            "/relative/path",
            "https://",
            "not a url",
            "https://api buddy.works",
        ],
    )
    def test_rejects_non_https_url(self, api_url):
        """Should reject anything but an absolute HTTPS URL."""
        with pytest.raises(ConfigError) as exc_info:
            resolve_endpoint(AuthInput(api_url=api_url))
        assert "HTTPS" in str(exc_info.value)

    @pytest.mark.parametrize("code", sorted(REGIONS))
    def test_supported_regions(self, code):
        """Should map every supported region to its fixed URL."""
        source = resolve_endpoint(AuthInput(region=code))
        assert source == Region(code=code, url=REGIONS[code])

    def test_eu_region_url(self):
        """Should resolve EU to the EU API host."""
        assert resolve_endpoint(AuthInput(region="EU")).url == "https://api.eu.buddy.works"

    @pytest.mark.parametrize("code", ["eu", "us", "Eu"])
    def test_region_is_case_sensitive(self, code):
        """Should reject region codes that differ only in case."""
        with pytest.raises(ConfigError) as exc_info:
            resolve(AuthInput(provider_id="p", region=code))
        assert f"Invalid region input: {code}" in str(exc_info.value)

    def test_region_surrounding_whitespace_trimmed(self):
        """Should accept a region code padded with whitespace."""
        assert resolve_endpoint(AuthInput(region=" EU ")).url == REGIONS["EU"]

    @pytest.mark.parametrize("code", ["AP", "EUROPE", "XX", "E U"])
    def test_rejects_unknown_region(self, code):
        """Should fail naming the region and listing the valid ones."""
        with pytest.raises(ConfigError) as exc_info:
            resolve_endpoint(AuthInput(region=code))
        message = str(exc_info.value)
        assert code in message
        assert "EU" in message and "US" in message

    def test_default_endpoint(self):
        """Should fall back to the default URL without failing."""
        source = resolve_endpoint(AuthInput())
        assert isinstance(source, DefaultEndpoint)
        assert source.url == DEFAULT_BASE_URL


class TestResolve:
    """Tests for resolve."""

    def test_builds_resolved_config(self):
        """Should combine method, endpoint and debug flag."""
        config = resolve(AuthInput(provider_id=PROVIDER_ID, region="EU", debug=True))
        assert config.method == FederatedExchange(provider_id=PROVIDER_ID)
        assert config.endpoint == "https://api.eu.buddy.works"
        assert config.debug is True
        assert config.uses_exchange is True

    def test_static_key_config_does_not_use_exchange(self):
        """Should mark static key configs as not needing an exchange."""
        config = resolve(AuthInput(api_key=SecretStr("k"), provider_id=PROVIDER_ID))
        assert config.uses_exchange is False

    def test_method_error_reported_before_endpoint_error(self):
        """Should report the missing method even with a bad region."""
        with pytest.raises(ConfigError) as exc_info:
            resolve(AuthInput(region="MARS"))
        assert "api_key or provider_id" in str(exc_info.value)

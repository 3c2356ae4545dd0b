from __future__ import annotations

import pytest

from services.env_cache import EnvCache
from services.env_errors import (
    InvalidBooleanError,
    InvalidEmailError,
    InvalidEnumError,
    InvalidHostError,
    InvalidJsonError,
    InvalidNumberError,
    InvalidObjectError,
    InvalidOptionsError,
    InvalidUrlError,
    RequiredValueError,
)
from services.env_options import EnvOptions
from services.env_service import EnvService
from services.env_settings import EnvSettings


def test_custom_validator_runs_once_per_key(service, env_source):
    env_source.set("APP_NAME", "stone")
    calls = []

    def validator(key, value, options):
        calls.append((key, value))
        return value.upper()

    assert service.custom("APP_NAME", validator) == "STONE"
    env_source.set("APP_NAME", "changed")
    assert service.custom("APP_NAME", validator) == "STONE"
    assert calls == [("APP_NAME", "stone")]


def test_clear_cache_rereads_source(service, env_source):
    env_source.set("APP_NAME", "first")
    assert service.string("APP_NAME") == "first"

    env_source.set("APP_NAME", "second")
    assert service.string("APP_NAME") == "first"

    service.clear_cache()
    assert service.string("APP_NAME") == "second"


def test_default_values_are_not_cached(service, env_source):
    assert service.string("APP_ALIAS", "fallback") == "fallback"
    assert "APP_ALIAS" not in service.cache

    env_source.set("APP_ALIAS", "real")
    assert service.string("APP_ALIAS", "fallback") == "real"
    assert service.cache.lookup("APP_ALIAS") == "real"


def test_value_equal_to_default_is_not_cached(service, env_source):
    env_source.set("PORT", "8080")
    assert service.number("PORT", 8080) == 8080
    assert "PORT" not in service.cache


def test_float_result_equal_to_int_default_is_not_cached(service, env_source):
    env_source.set("RATIO", "0.0")
    assert service.number("RATIO", 0) == 0
    assert "RATIO" not in service.cache


def test_bool_result_is_not_treated_as_numeric_default(service, env_source):
    env_source.set("FLAG", "1")
    assert service.custom("FLAG", lambda key, value, opts: True, {"default": 1}) is True
    assert "FLAG" in service.cache


def test_missing_required_string_raises(service):
    with pytest.raises(RequiredValueError) as excinfo:
        service.string("MISSING")
    assert excinfo.value.key == "MISSING"
    assert "MISSING is required" in str(excinfo.value)


def test_blank_required_value_raises(service, env_source):
    env_source.set("BLANK", "   ")
    with pytest.raises(RequiredValueError):
        service.string("BLANK")


def test_explicit_none_default_makes_key_optional(service):
    assert service.string("MISSING", None) is None


def test_false_and_zero_defaults_count_as_set(service):
    assert service.boolean("FLAG", False) is False
    assert service.number("COUNT", 0) == 0


def test_isolated_services_do_not_share_cache(env_source):
    env_source.set("APP_NAME", "one")
    first = EnvService(env_source)
    second = EnvService(env_source)
    assert first.string("APP_NAME") == "one"

    env_source.set("APP_NAME", "two")
    assert first.string("APP_NAME") == "one"
    assert second.string("APP_NAME") == "two"


def test_injected_cache_is_used(env_source):
    cache = EnvCache()
    cache.store("APP_NAME", "cached")
    service = EnvService(env_source, cache=cache)
    assert service.string("APP_NAME") == "cached"


def test_number_parses_integers_and_floats(service, env_source):
    env_source.set("PORT", "42")
    env_source.set("RATIO", "0.25")
    env_source.set("OFFSET", "-3")

    port = service.number("PORT")
    assert port == 42
    assert isinstance(port, int)
    assert service.number("RATIO") == pytest.approx(0.25)
    assert service.number("OFFSET") == -3


def test_number_rejects_non_numeric(service, env_source):
    env_source.set("PORT", "eighty")
    with pytest.raises(InvalidNumberError):
        service.number("PORT")


def test_number_missing_optional_uses_default(service):
    assert service.number("APP_UUID", 4444) == 4444


def test_number_coerces_numeric_string_default(service):
    port = service.number("PORT", "8080")
    assert port == 8080
    assert isinstance(port, int)
    assert service.number("RATIO", {"default": " 0.5 "}) == pytest.approx(0.5)


def test_number_passes_non_numeric_defaults_through(service):
    assert service.number("PORT", None) is None
    assert service.number("LIMIT", "unlimited") == "unlimited"


@pytest.mark.parametrize(
    "raw, expected",
    [("TRUE", True), ("true", True), ("1", True), ("False", False), ("0", False)],
)
def test_boolean_literals(service, env_source, raw, expected):
    env_source.set("APP_DEBUG", raw)
    assert service.boolean("APP_DEBUG") is expected


def test_boolean_rejects_other_words(service, env_source):
    env_source.set("APP_DEBUG", "yes")
    with pytest.raises(InvalidBooleanError):
        service.boolean("APP_DEBUG")


def test_boolean_missing_optional_uses_default(service):
    assert service.boolean("APP_DEBUG_OLD", True) is True


def test_array_splits_and_trims(service, env_source):
    env_source.set("HOSTS", "a, b ,c")
    assert service.array("HOSTS") == ["a", "b", "c"]


def test_array_custom_separator(service, env_source):
    env_source.set("PATHS", "/usr/bin; /bin")
    assert service.array("PATHS", {"separator": ";"}) == ["/usr/bin", "/bin"]


def test_array_default_when_missing(service):
    default: list = []
    assert service.array("HOSTS", default) is default


def test_array_reject_empty(service, env_source):
    env_source.set("HOSTS", " , ")
    assert service.array("HOSTS") == ["", ""]

    service.clear_cache()
    with pytest.raises(RequiredValueError):
        service.array("HOSTS", {"reject_empty": True})


def test_array_reject_empty_from_settings(env_source):
    env_source.set("HOSTS", ",")
    service = EnvService(env_source, settings=EnvSettings(reject_empty=True))
    with pytest.raises(RequiredValueError):
        service.array("HOSTS")


def test_object_coerces_values(service, env_source):
    env_source.set("APP_CONTEXT", "a:1,b:true,c:hi")
    assert service.object("APP_CONTEXT") == {"a": 1, "b": True, "c": "hi"}


def test_object_keeps_colons_in_values(service, env_source):
    env_source.set("ENDPOINTS", "api: http://localhost:8000 , ratio:0.5")
    assert service.object("ENDPOINTS") == {"api": "http://localhost:8000", "ratio": 0.5}


def test_object_rejects_pair_without_colon(service, env_source):
    env_source.set("APP_CONTEXT", "a:1,broken")
    with pytest.raises(InvalidObjectError) as excinfo:
        service.object("APP_CONTEXT")
    assert excinfo.value.metadata["segment"] == "broken"


def test_object_reject_empty(service, env_source):
    env_source.set("APP_CONTEXT", ",,")
    with pytest.raises(RequiredValueError):
        service.object("APP_CONTEXT", {"reject_empty": True})


def test_object_optional_default(service):
    default: dict = {}
    assert service.object("APP_CONTEXT_OLD", {"default": default, "optional": True}) is default


def test_json_parses_document(service, env_source):
    env_source.set("APP_METADATA", '{"name": "stone", "tags": [1, 2]}')
    assert service.json("APP_METADATA") == {"name": "stone", "tags": [1, 2]}


def test_json_invalid_required_raises(service, env_source):
    env_source.set("APP_METADATA", "{not json")
    with pytest.raises(InvalidJsonError):
        service.json("APP_METADATA")


def test_json_invalid_optional_returns_default(service, env_source):
    env_source.set("APP_METADATA", "{not json")
    assert service.json("APP_METADATA", {"default": {"fallback": True}}) == {"fallback": True}


def test_enum_positional_form_with_default(service):
    assert service.enum("NODE_ENV", ["dev", "prod"], "dev") == "dev"


def test_enum_options_form(service, env_source):
    env_source.set("NODE_ENV", "prod")
    assert service.enum("NODE_ENV", {"enums": ["dev", "prod", "local"]}) == "prod"


def test_enum_rejects_unknown_value(service, env_source):
    env_source.set("NODE_ENV", "staging")
    with pytest.raises(InvalidEnumError) as excinfo:
        service.enum("NODE_ENV", ["dev", "prod"])
    assert "dev, prod" in str(excinfo.value)
    assert excinfo.value.metadata["enums"] == ["dev", "prod"]


def test_enum_optional_returns_unlisted_value(service, env_source):
    env_source.set("NODE_ENV", "staging")
    assert service.enum("NODE_ENV", ["dev", "prod"], "dev") == "staging"


def test_enum_missing_without_default_is_required(service):
    with pytest.raises(RequiredValueError):
        service.enum("NODE_ENV", ["dev", "prod"])


def test_email_accessor(service, env_source):
    env_source.set("APP_EMAIL", "admin@example.com")
    env_source.set("BAD_EMAIL", "not-an-email")
    assert service.email("APP_EMAIL") == "admin@example.com"
    with pytest.raises(InvalidEmailError):
        service.email("BAD_EMAIL")


def test_email_default(service):
    assert service.email("APP_EMAIL_OLD", "default_email@example.com") == "default_email@example.com"


def test_url_accessor_respects_flags(service, env_source):
    env_source.set("API_URL", "https://api.example.com/v1")
    env_source.set("LOCAL_URL", "http://localhost:3000")
    env_source.set("BARE_URL", "example.com")

    assert service.url("API_URL") == "https://api.example.com/v1"
    with pytest.raises(InvalidUrlError):
        service.url("LOCAL_URL")
    assert service.url("LOCAL_URL", {"tld": False}) == "http://localhost:3000"
    with pytest.raises(InvalidUrlError):
        service.url("BARE_URL")
    assert service.url("BARE_URL", {"protocol": False}) == "example.com"


def test_url_and_host_accept_configured_protocols(service, env_source):
    env_source.set("CACHE_URL", "redis://cache.example.com:6379")
    env_source.set("BROKER_HOST", "amqp://broker.example.com")

    with pytest.raises(InvalidUrlError):
        service.url("CACHE_URL")
    assert service.url("CACHE_URL", {"protocols": ["redis", "rediss"]}) == "redis://cache.example.com:6379"
    assert service.host("BROKER_HOST", {"protocols": ["amqp"]}) == "amqp://broker.example.com"


def test_host_accepts_ip_or_url(service, env_source):
    env_source.set("DB_HOST", "10.0.0.5")
    env_source.set("CACHE_HOST", "https://cache.example.com")
    env_source.set("V6_HOST", "::1")
    env_source.set("BAD_HOST", "not a host")

    assert service.host("DB_HOST") == "10.0.0.5"
    assert service.host("CACHE_HOST") == "https://cache.example.com"
    assert service.host("V6_HOST", {"version": 6}) == "::1"
    with pytest.raises(InvalidHostError):
        service.host("BAD_HOST")


def test_string_format_delegates(service, env_source):
    env_source.set("APP_EMAIL", "nope")
    with pytest.raises(InvalidEmailError):
        service.string("APP_EMAIL", {"format": "email"})

    env_source.set("APP_URL", "https://example.com")
    assert service.string("APP_URL", {"format": "url"}) == "https://example.com"


def test_get_dispatches_on_type(service, env_source):
    env_source.set("APP_ID", "7")
    env_source.set("APP_DEBUG", "0")
    env_source.set("APP_ENVS", "dev,prod")

    assert service.get("APP_ID", {"type": "number"}) == 7
    assert service.get("APP_DEBUG", EnvOptions(type="boolean")) is False
    assert service.get("APP_ENVS", {"type": "array"}) == ["dev", "prod"]


def test_get_without_options_reads_string(service, env_source):
    env_source.set("APP_NAME", "stone")
    assert service.get("APP_NAME") == "stone"


def test_get_bare_default_routes_to_string(service):
    assert service.get("APP_UUID", 5555) == 5555


def test_get_with_callable_uses_custom(service, env_source):
    env_source.set("APP_PORTS", "80|443")
    ports = service.get("APP_PORTS", lambda key, value, opts: [int(p) for p in value.split("|")])
    assert ports == [80, 443]


def test_get_enum_through_dispatch(service):
    options = {"type": "enum", "default": "local", "optional": True, "enums": ["dev", "prod", "local"]}
    assert service.get("NODE_ENV_OLD", options) == "local"


def test_get_unknown_type_reads_string(service, env_source):
    env_source.set("APP_NAME", "stone")
    assert service.get("APP_NAME", {"type": "date"}) == "stone"


def test_get_rejects_malformed_options(service):
    with pytest.raises(InvalidOptionsError):
        service.get("APP_NAME", {"type": "string", "separator": ""})


def test_custom_validator_receives_extra_options(service, env_source):
    env_source.set("WORKERS", "3")

    def at_least(key, value, opts):
        number = int(value)
        if number < opts.model_extra["min"]:
            raise ValueError(key)
        return number

    assert service.custom("WORKERS", at_least, {"min": 1}) == 3


@pytest.mark.parametrize(
    "mode, production, testing",
    [
        ("production", True, False),
        ("prod", True, False),
        ("test", False, True),
        ("testing", False, True),
        ("development", False, False),
    ],
)
def test_mode_helpers(service, env_source, mode, production, testing):
    env_source.set("NODE_ENV", mode)
    assert service.is_(mode)
    assert service.is_production() is production
    assert service.is_prod() is production
    assert service.is_not_production() is not production
    assert service.is_not_prod() is not production
    assert service.is_testing() is testing


def test_mode_helpers_without_mode_variable(service):
    assert service.is_production() is False
    assert service.is_testing() is False


def test_mode_key_is_configurable(env_source):
    env_source.set("APP_ENV", "prod")
    service = EnvService(env_source, settings=EnvSettings(mode_key="APP_ENV"))
    assert service.is_production()


def test_raw_value_bypasses_cache(service, env_source):
    env_source.set("APP_NAME", "first")
    service.string("APP_NAME")
    env_source.set("APP_NAME", "second")
    assert service.raw_value("APP_NAME") == "second"

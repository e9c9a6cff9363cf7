import logging

from switchboard import config
from switchboard import logger as logger_mod


def test_is_production_reads_app_env(clean_env):
    assert config.is_production() is False
    clean_env.setenv("RAILS_ENV", "production")
    assert config.is_production() is True
    clean_env.setenv("APP_ENV", "development")
    assert config.is_production() is False


def test_local_llm_url_selection(clean_env):
    assert config.local_llm_url() == config.LOCAL_LLM_URL_DEVELOPMENT

    clean_env.setenv("APP_ENV", "production")
    assert config.local_llm_url() == config.LOCAL_LLM_URL_PRODUCTION_DEFAULT

    clean_env.setenv("LOCAL_LLM_URL", "http://explicit:11434/")
    assert config.local_llm_url() == "http://explicit:11434"


def test_api_key_fallback_names(clean_env):
    assert config.api_key("openai") == ""
    clean_env.setenv("OPENAI_KEY", "legacy")
    assert config.api_key("openai") == "legacy"
    clean_env.setenv("OPENAI_API_KEY", "primary")
    assert config.api_key("openai") == "primary"
    clean_env.setenv("CLAUDE_API_KEY", "c")
    assert config.api_key("claude") == "c"
    assert config.api_key("local") == ""


def test_default_service_and_timeout(clean_env):
    assert config.default_service() == "gemini"
    clean_env.setenv("SERVICE", " Groq ")
    assert config.default_service() == "groq"

    assert config.timeout_s() == config.DEFAULT_TIMEOUT_S
    clean_env.setenv("LLM_TIMEOUT_SEC", "15")
    assert config.timeout_s() == 15.0
    clean_env.setenv("LLM_TIMEOUT_SEC", "soon")
    assert config.timeout_s() == config.DEFAULT_TIMEOUT_S


def test_logger_helpers():
    log = logger_mod.get_logger()
    assert log is logger_mod.logger
    assert log.name == "switchboard"
    assert callable(logger_mod.info)

    previous = log.level
    root_previous = logging.getLogger().level
    try:
        logger_mod.set_logging_level("warning")
        assert log.level == logging.WARNING
        logger_mod.set_logging_level("loud")
        assert log.level == logging.WARNING
    finally:
        log.setLevel(previous)
        logging.getLogger().setLevel(root_previous)

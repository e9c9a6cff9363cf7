from switchboard.llm import Dispatcher, improve_prompt, set_dispatcher
from switchboard.llm.prompts import META_PROMPT
from switchboard.llm.types import FailureKind, ProviderResult


def test_improve_prompt_routes_through_openai(fake_handler):
    handler = fake_handler("openai", [ProviderResult.success("You are a summarizer...")])
    d = Dispatcher({"openai": handler})

    assert improve_prompt("summarize articles", dispatcher=d) == "You are a summarizer..."

    request = handler.requests[0]
    assert request.service == "openai"
    assert request.model == "gpt-4o"
    assert request.messages[0].role == "system"
    assert request.messages[0].content == META_PROMPT
    assert request.messages[1].content == "Task, Goal, or Current Prompt:\nsummarize articles"


def test_improve_prompt_uses_process_dispatcher(fake_handler):
    handler = fake_handler("openai", [ProviderResult.fail(FailureKind.NETWORK, "down")])
    set_dispatcher(Dispatcher({"openai": handler}))
    try:
        assert improve_prompt("anything") is None
    finally:
        set_dispatcher(None)
    assert handler.calls == 1


def test_module_dispatch_uses_process_dispatcher(fake_handler):
    from switchboard.llm import dispatch

    handler = fake_handler("local", [ProviderResult.success("4")])
    set_dispatcher(Dispatcher({"local": handler}))
    try:
        assert dispatch(service="local", prompt="2+2=?") == "4"
    finally:
        set_dispatcher(None)

"""switchboard

Routes chat-bot prompts to hosted or local language models.

    from switchboard.llm import dispatch

    answer = dispatch(prompt="2+2=?", service="local")
"""

__version__ = "0.1.0"

from __future__ import annotations

"""PHP outline tool wrapper for LangChain agents.

Outlines a PHP file or directory and returns the JSON mapping, giving an
agent the shape of a class at a fraction of the tokens of its source.
"""

import json

from langchain_core.tools import tool  # type: ignore

from php_outline.app.core.config import get_settings
from php_outline.outline.provider import OutlineError, OutlineProvider
from php_outline.outline.reducer import FilterMode


def php_outline_tool(path: str, public: bool = False) -> str:
    """Outline PHP classes found at ``path``.

    This plain function is used directly in tests. A LangChain tool wrapper
    is also exported as `php_outline_tool_def` for agent tool use.

    Parameters
    ----------
    path: str
        PHP file or directory.
    public: bool
        Keep only public, non-abstract members.

    Returns
    -------
    str
        JSON string: { <file path>: outline | null | {error} } or { error }.
    """

    filter_mode = FilterMode.PUBLIC_ONLY if public else FilterMode.ALL
    try:
        result = OutlineProvider(get_settings()).outline(path, filter_mode)
    except (OutlineError, OSError) as e:
        return json.dumps({"error": str(e)})
    return json.dumps(result)


# LangChain tool definition used by agent tool registries
php_outline_tool_def = tool("php_outline")(php_outline_tool)

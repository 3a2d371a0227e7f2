"""Command line entry point: analyze a hex encoded script."""

from __future__ import annotations

import sys

from .analyzer import AnalysisError, analyze_script
from .context import ScriptContext, ScriptRules, ScriptVersion
from .hexutil import HexDecodeError, decode_hex
from .script import ParseScriptError, Script


def main(argv=None) -> int:
    """Print the script and its spending paths; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print('missing argument "script"', file=sys.stderr)
        return 2

    script_hex = args[0]
    print(f"hex: {script_hex}")
    try:
        script = Script.parse_from_bytes(decode_hex(script_hex))
    except (HexDecodeError, ParseScriptError) as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    print(f"script:\n{script}")
    print()
    ctx = ScriptContext(ScriptVersion.SEGWIT_V0, ScriptRules.ALL)
    try:
        print(analyze_script(script, ctx))
    except AnalysisError as err:
        print(err)
    return 0


if __name__ == "__main__":
    sys.exit(main())
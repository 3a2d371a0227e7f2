# btcscript-analyzer

A static analyzer for Bitcoin scripts. Instead of running a script against
concrete witness data, it executes it symbolically: unknown stack items become
placeholders such as `<stack item #0>`, and every `OP_IF`, `OP_NOTIF` and
`OP_IFDUP` forks the analysis into separate paths. For each path that can
succeed, it reports:

- how many stack items the spender has to provide,
- the conditions those items must satisfy (signature checks, hash preimages,
  equalities, ...), simplified where possible,
- the absolute locktime (`OP_CHECKLOCKTIMEVERIFY`) requirement, and
- the relative locktime (`OP_CHECKSEQUENCEVERIFY`) requirement.

Paths that fail (for example through `OP_RETURN`, an unbalanced conditional,
a malformed public key or signature, or conditions that contradict each other)
are dropped. If no path remains, the script is reported as unspendable.

The rules applied depend on a script context: the script version (legacy,
segwit v0 or tapscript) and whether only consensus rules or also the standard
policy rules are enforced.

## Installation

```
pip install btcscript-analyzer
```

## Command line

Pass the script as hex:

```
btcscript-analyzer 76a914000000000000000000000000000000000000000088ac
```

The command echoes the hex, prints the decoded script with one element per
line (indented inside `OP_IF`/`OP_NOTIF`/`OP_ELSE` blocks), and then the
analysis of every spending path. It always analyzes the script as segwit v0
with all policy rules enforced.

If the hex or the script bytes cannot be decoded, the error is printed to
standard error and the exit status is 1; without an argument the exit status
is 2. A script that is unspendable or uses a disabled opcode is reported on
standard output with exit status 0.

## Library use

```python
from btcscript_analyzer.analyzer import AnalysisError, analyze_script
from btcscript_analyzer.context import ScriptContext, ScriptRules, ScriptVersion
from btcscript_analyzer.script import Script

raw, script = Script.parse_from_asm("OP_DUP OP_HASH160 <0011223344556677889900112233445566778899> OP_EQUALVERIFY OP_CHECKSIG")
ctx = ScriptContext(ScriptVersion.SEGWIT_V0, ScriptRules.ALL)
try:
    print(analyze_script(script, ctx))
except AnalysisError as err:
    print(err)
```

The main entry points are:

- `btcscript_analyzer.hexutil.decode_hex` and `decode_hex_ignore_whitespace`
  turn hex text into bytes; they raise `HexDecodeError` (more precisely
  `OddHexLengthError` or `InvalidHexCharacterError`) on bad input.
  `encode_hex` produces lower-case hex.
- `btcscript_analyzer.script.Script.parse_from_bytes` parses serialized script
  bytes and raises `ParseScriptError`. `Script.parse_from_asm` assembles
  whitespace separated assembly (opcode names, integers, and hex pushes between
  `<` and `>`) and returns a tuple of the serialized bytes and the parsed
  `Script`; it raises `ParseAsmScriptError`. A `Script` is iterable over its
  elements (`Opcode` values and `bytes` pushes) and can be rendered with
  `format_space_separated()`, `format_newline_separated()` or
  `format_indented()` (also its `str()`). `to_bytes()` concatenates opcode
  bytes and pushed data without push length prefixes.
- `btcscript_analyzer.context.ScriptContext` combines a `ScriptVersion` and a
  `ScriptRules` value.
- `btcscript_analyzer.analyzer.analyze_script(script, ctx)` returns the
  analysis report as text, and raises `AnalysisError` when the script uses a
  disabled opcode or has no spending path. `ScriptAnalyzer(script).run(ctx)`
  returns the spendable paths as a list of
  `btcscript_analyzer.requirements.PathResult` objects instead, and raises
  `btcscript_analyzer.errors.ScriptFailure` for a disabled opcode.

Smaller building blocks are available as well: `opcode.Opcode` (lookup by name
with `Opcode.from_name`, which accepts names with or without the `OP_` prefix
in any case), `convert.encode_int` / `decode_int` for script numbers,
`checksig.check_pub_key` and `checksig.is_valid_signature_encoding` for key and
strict DER checks, `locktime.locktime_to_string` for human-readable locktimes,
and `expr.evaluate` / `conditions.simplify_conditions` for simplifying symbolic
expressions.

## What it does not do

The package has a command line and a library interface only; there is no
graphical or browser front end, and it does not fetch scripts or addresses from
a blockchain. It does not verify signatures cryptographically: signature and
public key checks only look at their encoding. Analysis runs in a single
thread.

## Running the tests

```
pip install -e ".[test]"
pytest
```
"""Literal constants used by unionpep."""

APP_NAME = "unionpep"

DOCUMENT_FILENAME = "pep-0604.rst"
CONTRACT_FILENAME = "contract.json"
DATA_DIRNAME = "data"

WARNING_PREFIX = "WARNING:"
ERROR_PREFIX = "ERROR:"

# Characters reStructuredText accepts as section adornment.
ADORNMENT_CHARS = "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"

GRAMMAR_LANGUAGES = frozenset({"ebnf", "peg", "grammar"})
CODE_DIRECTIVES = frozenset({"code-block", "code", "sourcecode"})

DEBATE_TAGS = ("PRO", "CON")

EXAMPLE_MODULE_NAME = "__unionpep_example__"

OUTLINE_INDENT = "  "

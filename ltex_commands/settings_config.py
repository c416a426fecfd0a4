"""Setting names and language tables used by the command layer.

This module defines which code languages map to which file extensions,
the names of the language-specific settings the commands write to, and the
deprecated aliases that are still honoured for the scope preference.
"""

SETTINGS_SECTION = "ltex"

ENABLED_SETTING = "ltex.enabled"
LANGUAGE_SETTING = "ltex.language"
CONFIGURATION_TARGET_SECTION = "ltex.configurationTarget"

DEFAULT_LANGUAGE = "en-US"

# Setting names written by the add-to-dictionary style commands
DICTIONARY = "dictionary"
DISABLED_RULES = "disabledRules"
HIDDEN_FALSE_POSITIVES = "hiddenFalsePositives"

LANGUAGE_SPECIFIC_SETTINGS = (DICTIONARY, DISABLED_RULES, HIDDEN_FALSE_POSITIVES)

# Old ltex.configurationTarget keys, deprecated since 8.0.0
DEPRECATED_CONFIGURATION_TARGET_ALIASES = {
    DICTIONARY: "addToDictionary",
    DISABLED_RULES: "disableRule",
    HIDDEN_FALSE_POSITIVES: "ignoreRuleInSentence",
}

# Languages enabled when ltex.enabled is the legacy boolean ``true``
LEGACY_ENABLED_CODE_LANGUAGES = ("bibtex", "latex", "markdown", "rsweave")

CODE_LANGUAGE_FILE_EXTENSIONS = {
    "bibtex": ("bib",),
    "latex": ("tex",),
    "rsweave": ("tex",),
    "markdown": ("md",),
}

# Reverse lookup used when a document is checked without an explicit language id
FILE_EXTENSION_CODE_LANGUAGES = {
    "bib": "bibtex",
    "tex": "latex",
    "md": "markdown",
}

# Entries beginning with this prefix refer to an external file
EXTERNAL_FILE_PREFIX = ":"

# Entries beginning with this prefix remove an entry inherited from elsewhere
NEGATION_PREFIX = "-"

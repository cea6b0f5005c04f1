"""Constants used in the project."""

from enum import Enum


class EnvVars(Enum):
    """Environment variables honored by the configuration layer.

    Args:
        Enum (string): Environment variable names.
    """

    CONFIG = "GEMLOAD_CONFIG"
    LOG_LEVEL = "GEMLOAD_LOG_LEVEL"
    TRY_ACTIVATE = "GEMLOAD_TRY_ACTIVATE"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration defaults; not intended to provide behavior.
    """

    REQUIRE_PATHS = ["lib"]
    LOADABLE_SUFFIXES = [".rb", ".py", ".so"]
    TRY_ACTIVATE = True
    CONFIG_SECTION = "gemload"
    LOG_LEVEL = "INFO"
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    # Error message templates
    MSG_AMBIGUOUS = "{path} found in multiple gems: {names}"
    MSG_UNSATISFIABLE = "unable to find a version of '{name}' to activate"
    MSG_ALREADY_ACTIVATED = "can't activate {full_name}, already activated {active}"
    MSG_DEPENDENCY_CONFLICT = (
        "unable to activate {full_name}, because {active} conflicts with {dependency}"
    )
    MSG_PENDING_CONFLICT = "can't activate {full_name}, already required {dependency}"
    MSG_MISSING_SPEC ="could not find '{name}' ({requirement}) among {total} total gem(s)"
    MSG_FEATURE_NOT_FOUND = "cannot load such file -- {path}"

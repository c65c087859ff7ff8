import logging
from dataclasses import dataclass, fields
from difflib import get_close_matches
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ruamel.yaml import YAML, constructor, scanner

from pyfitlib.core.matrix import Matrix, parse_matrix
from pyfitlib.data.constants import ErrorMessages, FittingConstants
from pyfitlib.parsing.config.yaml_keys import (FITTING_KEY, INITIAL_GUESS_KEY, MAX_ITERATIONS_KEY,
                                               RAISE_ON_NONCONVERGENCE_KEY, STEP_KEY, TOLERANCE_KEY)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FitConfig:
    """
    Numerical settings of the Gauss-Newton engine.

    Attributes:
        step (float): Forward finite-difference step used for the Jacobian.
        tolerance (float): Absolute tolerance on the largest parameter update.
        max_iterations (int): Iteration budget before the fit is reported as not converged.
        raise_on_nonconvergence (bool): Raise NonConvergenceError instead of warning
            when the budget is exhausted.
    """
    step: float = FittingConstants.DEFAULT_STEP
    tolerance: float = FittingConstants.DEFAULT_TOLERANCE
    max_iterations: int = FittingConstants.DEFAULT_MAX_ITERATIONS
    raise_on_nonconvergence: bool = False

    def __post_init__(self) -> None:
        for key in (STEP_KEY, TOLERANCE_KEY):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
                raise ValueError(ErrorMessages.NON_POSITIVE_SETTING.format(key=key, value=value))
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int) \
                or self.max_iterations <= 0:
            raise ValueError(ErrorMessages.NON_POSITIVE_SETTING.format(key=MAX_ITERATIONS_KEY,
                                                                        value=self.max_iterations))
        if not isinstance(self.raise_on_nonconvergence, bool):
            raise ValueError(f"'{RAISE_ON_NONCONVERGENCE_KEY}' must be true or false, "
                             f"got {self.raise_on_nonconvergence!r}")

    @classmethod
    def from_dict(cls, settings: Optional[Mapping[str, Any]]) -> "FitConfig":
        """Build a configuration from a mapping, rejecting unknown keys."""
        settings = dict(settings or {})
        valid_keys = {f.name for f in fields(cls)}
        unknown = set(settings) - valid_keys
        if unknown:
            logger.error("Unknown fitting settings: %s", unknown)
            error_msg = "Unknown fitting settings: \n ->"
            for key in sorted(unknown):
                matches = get_close_matches(key, valid_keys, n=1, cutoff=0.6)
                suggestion = f" (did you mean '{matches[0]}'?)" if matches else ""
                error_msg += f" - '{key}'{suggestion}\n"
            raise ValueError(error_msg)
        return cls(**settings)


class FitConfigParser:
    """Parser for YAML fitting configuration files.

    The file holds an optional ``fitting`` section with the Gauss-Newton settings and
    an optional ``initial_guess``, given either as a list or as matrix text like
    ``"[6; 0.5; 0.04]"``.
    """

    def __init__(self, config_path: Union[str, Path]) -> None:
        self.config_path = Path(config_path)
        self.config = self._load_config()
        logger.info("Successfully loaded fitting configuration from: %s", self.config_path)

    def _load_config(self) -> Dict[str, Any]:
        yaml = YAML(typ='safe')
        yaml.allow_duplicate_keys = False
        try:
            logger.debug("Loading YAML file: %s", self.config_path)
            with open(self.config_path, 'r') as f:
                config = yaml.load(f)
        except FileNotFoundError as e:
            logger.error("YAML file not found: %s", self.config_path)
            raise FileNotFoundError(f"YAML file not found: {self.config_path}") from e
        except constructor.DuplicateKeyError as e:
            logger.error("Duplicate key found in YAML file %s: %s", self.config_path, e)
            raise ValueError(f"Duplicate key in {self.config_path}: {str(e)}") from e
        except scanner.ScannerError as e:
            logger.error("YAML syntax error in file %s: %s", self.config_path, e)
            raise ValueError(f"YAML syntax error in {self.config_path}: {str(e)}") from e
        if config is None:
            config = {}
        if not isinstance(config, dict):
            logger.error("Invalid YAML structure - expected dictionary at root level")
            raise ValueError("The fitting configuration must be a dictionary of key-value pairs, "
                             "not a list or scalar value")
        return config

    @property
    def fit_config(self) -> FitConfig:
        settings = self.config.get(FITTING_KEY) or {}
        if not isinstance(settings, dict):
            raise ValueError(f"The '{FITTING_KEY}' section must be a dictionary, got {type(settings).__name__}")
        return FitConfig.from_dict(settings)

    @property
    def initial_guess(self) -> Optional[Matrix]:
        guess = self.config.get(INITIAL_GUESS_KEY)
        if guess is None:
            return None
        matrix = parse_matrix(guess) if isinstance(guess, str) else Matrix.column(guess)
        if matrix.rows == 1:
            matrix = matrix.transpose()
        if matrix.cols != 1:
            raise ValueError(f"'{INITIAL_GUESS_KEY}' must be a single row or column, got {matrix.rows}x{matrix.cols}")
        return matrix


def load_fit_config(config_path: Union[str, Path]) -> FitConfig:
    """Read the Gauss-Newton settings from a YAML file."""
    return FitConfigParser(config_path).fit_config

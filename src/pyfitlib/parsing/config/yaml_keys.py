"""Constants used for YAML fitting configuration files."""

# Section keys
FITTING_KEY = "fitting"
INITIAL_GUESS_KEY = "initial_guess"

# Gauss-Newton setting keys
STEP_KEY = "step"
TOLERANCE_KEY = "tolerance"
MAX_ITERATIONS_KEY = "max_iterations"
RAISE_ON_NONCONVERGENCE_KEY = "raise_on_nonconvergence"

# Automatically export all constants (those that don't start with underscore)
__all__ = [name for name in globals() if not name.startswith('_') and name.isupper()]

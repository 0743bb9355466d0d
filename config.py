# ============================================================================
# HYPERPARAMETERS & CONFIGURATION
# ============================================================================
# Adjust these values to control the tuner and the simulated slide

# --- Windowed Search - Sampling & Narrowing ---
SIMS_PER_TRIAL = 500        # Random gain triples sampled per trial batch (larger = more exploration, slower)
SUB_SIMULATIONS = 101       # Start/target runs averaged for each gain triple (more = robust but slower)
TOP_K = 5                   # Number of best candidates kept each generation
GENERATIONS = 20            # Number of narrowing cycles
STARTING_WINDOW = 25.0      # Half-width of the search window around each candidate
SHRINK_FACTOR = 0.90        # Window multiplier applied after every generation
ELITISM = False             # Carry the previous candidates into the next ranking

# --- Windowed Search - Parameter Search Ranges ---
# Same magnitude bounds for all three gains.
MIN_GAIN = 0.01
MAX_GAIN = 100.0
KP_RANGE = (MIN_GAIN, MAX_GAIN)   # Proportional gain range: responds to current error
KI_RANGE = (MIN_GAIN, MAX_GAIN)   # Integral gain range: responds to accumulated error over time
KD_RANGE = (MIN_GAIN, MAX_GAIN)   # Derivative gain range: responds to rate of change of error

PID_RANGES = [KP_RANGE, KI_RANGE, KD_RANGE]

# --- Simulation ---
DT = 1 / 100.0              # Time step (seconds) - f=100 Hz
MAX_STEPS = 1000            # 10 s ceiling
DEADBAND = 0.01             # m, error tolerance for stability and penalties
STABLE_TIME = 0.5           # s inside the deadband before the slide counts as stable
SETTLE_HOLD_TIME = 0.5      # s after becoming stable before the run stops

# --- Cost Penalties ---
OVERSHOOT_PENALTY = 50
SETTLING_TIME_PENALTY = 10
STEADY_STATE_PENALTY = 50

# --- MiSUMi slides (SARC210) ---
NUM_SLIDES = 3
SLIDE_LENGTH = 0.1          # m
SLIDE_STROKE = 0.06         # m
SLIDE_MASS = 0.08           # kg
PAYLOAD_MASS = 1.0          # kg

# --- Motor: goBILDA Yellow Jacket 435 RPM on a pulley ---
TORQUE_STALL = 1.8338       # Nm
PULLEY_RADIUS = 0.0175      # m
W_NO_LOAD = 45.553093425    # rad/s
GRAVITY = 9.8067            # m/s^2, vertical slides only

# --- Output ---
VERBOSE = True              # Print a summary after every generation
SHOW_PROGRESS = True        # tqdm bar over each trial batch

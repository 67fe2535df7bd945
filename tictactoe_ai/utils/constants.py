"""
Constants for the Tic-Tac-Toe engine.
"""

# Board dimensions
BOARD_SIZE = 3
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# Marks
X = 'X'
O = 'O'
EMPTY = None
MARKS = (X, O)

# Cell groups by index (row-major, row = idx // 3, col = idx % 3)
CENTER = 4
CORNERS = (0, 2, 6, 8)
EDGES = (1, 3, 5, 7)
OPPOSITE_CORNERS = ((0, 8), (2, 6))

# Winning lines: rows, columns, diagonals
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

# Game outcomes
IN_PROGRESS = 'in_progress'
WIN = 'win'
DRAW = 'draw'

# Search scoring
# Terminal nodes score +/-(TERMINAL_SCORE - depth); evaluators stay inside
# +/-EVAL_CLAMP so they never collide with a terminal value.
TERMINAL_SCORE = 100
EVAL_CLAMP = 90

# Classical scores are divided by this before search sees them
CLASSICAL_SEARCH_SCALE = 10.0

# Difficulty levels
EASY = 'easy'
NORMAL = 'normal'
HARD = 'hard'
DIFFICULTIES = (EASY, NORMAL, HARD)

# Difficulty -> search depth
CLASSICAL_DEPTHS = {
    EASY: 1,      # looks one reply ahead
    NORMAL: 3,
    HARD: 9,      # full game tree, never loses
}
DEFAULT_CLASSICAL_DEPTH = 3

# Difficulty -> (search depth, noise level) for the learned evaluators
ML_CONFIGS = {
    EASY: (2, 0.3),
    NORMAL: (4, 0.1),
    HARD: (9, 0.0),
}

# Evaluation types accepted by the engine
CLASSICAL = 'classical'
ML = 'ml'
ML_BASIC = 'ml-basic'
ML_ADVANCED = 'ml-advanced'
EVALUATION_TYPES = (CLASSICAL, ML, ML_BASIC, ML_ADVANCED)

# Training
ACCURACY_EVERY = 50       # epochs between accuracy snapshots
MAX_HISTORY_GAMES = 500   # game history FIFO cap

"""
Web interface module for the Tic-Tac-Toe engine.

Provides a FastAPI server for:
- Asking the engine for a move and the ranked move list
- Reading, replacing and training the linear model
- Recording played games as training history
"""

#!/usr/bin/env python3
"""
Entry point for running the Tic-Tac-Toe web server.

Usage:
    python run_web.py [--host HOST] [--port PORT] [--reload]
                      [--data-dir DIR] [--dataset PATH]

Examples:
    python run_web.py                            # Run on localhost:8000
    python run_web.py --port 3000                # Run on localhost:3000
    python run_web.py --host 0.0.0.0             # Allow external connections
    python run_web.py --dataset data/games.csv   # Enable /api/train on a dataset
"""
import argparse
import os
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the Tic-Tac-Toe web server")
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory for the game history file (default: data)"
    )
    parser.add_argument(
        "--dataset",
        type=str,
        default=None,
        help="Dataset file used for training (CSV: 6 features then a +1/-1 label)"
    )

    args = parser.parse_args()

    # The app module reads these when uvicorn imports it
    os.environ["TICTACTOE_DATA_DIR"] = args.data_dir
    if args.dataset:
        os.environ["TICTACTOE_DATASET"] = args.dataset

    print(f"Starting Tic-Tac-Toe web server at http://{args.host}:{args.port}")
    print(f"API documentation: http://{args.host}:{args.port}/docs")
    print()

    uvicorn.run(
        "tictactoe_ai.web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )


if __name__ == "__main__":
    main()

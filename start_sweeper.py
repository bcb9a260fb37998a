"""
Session Sweeper Entry Point
Ends sessions whose waiting room or call length ran out
"""
from app.sessions.sweeper import start_sweeper

if __name__ == "__main__":
    start_sweeper()

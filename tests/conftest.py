import os
import sys

# Log to the console only while testing
os.environ.setdefault("LOG_DIRECTORY", "")

# Add the project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

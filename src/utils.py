"""
Utility functions for the monitor
"""

import json
from pathlib import Path
from datetime import datetime


def save_json(data, file_path):
    """Save data to JSON file"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def get_timestamp():
    """Get current timestamp"""
    return datetime.now().isoformat()

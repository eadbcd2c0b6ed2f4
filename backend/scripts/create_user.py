#!/usr/bin/env python3
"""
Recruiter Provisioning Script

Creates a user account that can sign in to the API. Passwords are stored
as bcrypt hashes.

Usage:
    python scripts/create_user.py --username alice --email alice@example.com --password s3cret

    # Prompt for the password instead of passing it on the command line
    python scripts/create_user.py --username alice --email alice@example.com
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ats.config import get_settings
from ats.database import Database
from ats.errors import ValidationError
from ats.services.auth import provision_user

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Create a recruiter account")
    parser.add_argument("--username", required=True, help="Sign-in name")
    parser.add_argument("--email", required=True, help="Address used for password resets")
    parser.add_argument("--password", help="Password (prompted for when omitted)")

    args = parser.parse_args()
    password = args.password or getpass.getpass("Password: ")

    database = Database(get_settings().database_url)
    await database.create_all()

    try:
        async with database.session() as session:
            user = await provision_user(session, args.username, args.email, password)
        logger.info(f"Created user {user.username} ({user.id})")
        return 0
    except ValidationError as e:
        logger.error(f"Could not create user: {e.message}")
        return 1
    finally:
        await database.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

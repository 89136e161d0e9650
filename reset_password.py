#!/usr/bin/env python3
"""
Reset a SaveUp user's password directly in the SQLite database.

The new password is hashed with the API's own PBKDF2 routine and
written through the SQLite store, so ``updatedAt`` is refreshed the
same way a profile update would refresh it.  Existing hashes are never
printed.

Usage:
    python reset_password.py --db ./saveup_api/saveup.db --email asha@example.com --password "NewStrongPass!234"

Without --password the new password is read from the terminal.
"""

import argparse
import getpass
import os
import sys

from saveup_api.app.core.security import hash_password
from saveup_api.app.store import SQLiteStore


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Reset a SaveUp user password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to the SQLite database file")
    ap.add_argument("--email", required=True, help="E-mail address of the account")
    ap.add_argument("--password", help="New password; prompted for when omitted")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    store = SQLiteStore(args.db)
    store.initialize()
    if not store.available:
        print(f"[!] Could not open database: {args.db}", file=sys.stderr)
        return 1

    user = store.get_user_by_email(args.email)
    if user is None:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        return 2

    new_password = args.password or getpass.getpass("New password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    store.update("users", user["id"], {"passwordHash": hash_password(new_password)})
    print(f"[+] Password updated for user {user['id']} ({args.email})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

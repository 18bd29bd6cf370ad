#!/usr/bin/env python3
"""
Reset a user's password in the business directory SQLite database.

This script DOES NOT read or reveal any existing passwords.  It sets a
new PBKDF2 hash for the given e-mail and ends every open session of
that user, so old tokens stop working.

Usage:
    python reset_password.py --email owner@example.com --password "NewStrongPass!234"
    python reset_password.py --db ./business_directory_api/business_directory.db --email owner@example.com

If --password is omitted, you will be prompted to enter it securely.
If --db is omitted, the database configured by DATABASE_URL is used.
"""

import os
import sys
import sqlite3
import argparse
import getpass

from business_directory_api.app.core.db import get_database_path
from business_directory_api.app.core.security import hash_password


def main(argv=None):
    ap = argparse.ArgumentParser(description="Reset a business directory user password (SQLite).")
    ap.add_argument("--db", help="Path to SQLite DB file (defaults to DATABASE_URL)")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args(argv)

    db_path = args.db or get_database_path()
    if not os.path.exists(db_path):
        print(f"[!] DB not found: {db_path}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < 6:
        print("[!] Password must be at least 6 characters.", file=sys.stderr)
        sys.exit(1)

    email = args.email.strip().lower()
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email = ?", (email,))
        row = cur.fetchone()
        if not row:
            print(f"[!] No user found with email: {email}", file=sys.stderr)
            sys.exit(2)

        cur.execute("UPDATE users SET password = ? WHERE id = ?", (hash_password(new_password), row[0]))
        cur.execute("DELETE FROM sessions WHERE user_id = ?", (row[0],))
        conn.commit()
        print(f"[+] Password updated for user: {email} ({cur.rowcount} session(s) ended)")
    finally:
        conn.close()


if __name__ == "__main__":
    main()

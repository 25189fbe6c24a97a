#!/usr/bin/env python3
"""
Password Hash Generator
Generates bcrypt password hashes for admin authentication.
Run this script to create the ADMIN_PASSWORD_HASH for your .env file,
or pass --check <hash> to test a password against an existing hash.
"""
import getpass
import sys

from bakery.utils.auth import hash_password, verify_password


def generate() -> None:
    """Prompt for a password and print the .env line."""
    print("=" * 60)
    print("Admin Password Hash Generator")
    print("=" * 60)
    print()
    print("Copy the output to your .env file as ADMIN_PASSWORD_HASH")
    print()

    # Get password securely (won't echo to screen)
    password = getpass.getpass("Enter admin password: ")

    if not password:
        print("\n❌ Error: Password cannot be empty")
        return

    password_confirm = getpass.getpass("Confirm password: ")

    if password != password_confirm:
        print("\n❌ Error: Passwords do not match")
        return

    print("\n⏳ Generating hash (this may take a moment)...")
    hashed = hash_password(password)

    print("\n✅ Success! Copy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hashed}")
    print()
    print("⚠️  Keep this hash secret and never commit it to version control!")
    print()


def check(hash_value: str) -> None:
    """Prompt for a password and report whether it matches hash_value."""
    print(f"Testing against hash: {hash_value[:30]}...")
    password = getpass.getpass("Enter password to test: ")

    if verify_password(password, hash_value):
        print("\n✅ Password matches!")
    else:
        print("\n❌ Password does not match.")
        print("Generate a new hash with: python generate_password_hash.py")


def main():
    if len(sys.argv) >= 3 and sys.argv[1] == "--check":
        check(sys.argv[2])
    else:
        generate()


if __name__ == "__main__":
    main()

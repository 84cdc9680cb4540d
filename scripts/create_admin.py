#!/usr/bin/env python3
"""
WebPoint - Create Admin User
Run this script to create an admin account for the admin panel.

Usage:
    python scripts/create_admin.py

Or with environment variables:
    ADMIN_USERNAME=admin ADMIN_PASSWORD=securepass123 python scripts/create_admin.py
"""
import os
import sys
import secrets
import string
import getpass

# Add parent directory to path so we can import the app
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from webpoint import create_app
from webpoint.routes.auth import create_admin_user, get_admin_by_username


def generate_password(length=16):
    """Generate a secure random password"""
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def main():
    app = create_app()

    with app.app_context():
        username = os.environ.get('ADMIN_USERNAME')
        password = os.environ.get('ADMIN_PASSWORD')

        if not username:
            print("\n" + "=" * 50)
            print("  WEBPOINT")
            print("  Admin User Setup")
            print("=" * 50 + "\n")
            username = input("Admin username: ").strip()

        if not username or len(username) < 3:
            print("Error: Username must be at least 3 characters")
            return 1

        if get_admin_by_username(username):
            print(f"Error: Admin {username} already exists")
            return 1

        if not password:
            use_generated = input("Generate password? (Y/n): ").strip().lower()
            if use_generated != 'n':
                password = generate_password()
                print(f"\n🔐 Generated password: {password}")
                print("   (Save this somewhere safe!)\n")
            else:
                password = getpass.getpass("Enter password: ")
                if password != getpass.getpass("Confirm password: "):
                    print("Error: Passwords don't match")
                    return 1

        if len(password) < 8:
            print("Error: Password must be at least 8 characters")
            return 1

        admin = create_admin_user(username, password)

        print("\n" + "=" * 50)
        print("  ✅ ADMIN USER CREATED SUCCESSFULLY")
        print("=" * 50)
        print(f"\n  Username: {admin.username}")
        print(f"  Password: {'*' * len(password)}")
        print("\n  Login at: /admin/login")
        print("=" * 50 + "\n")
        return 0


if __name__ == '__main__':
    sys.exit(main())

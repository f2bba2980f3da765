#!/usr/bin/env python3
"""
Generate secure secrets for the WK Poule scoring service
Run this script to generate the SECRET_KEY and the SCORING_API_TOKEN that
callers of the /api/scoring endpoints send as X-Scoring-Token
"""

import secrets


def generate_secrets():
    """Generate secure random keys for the application"""
    print("🔐 Generating secure secrets for WK Poule...")
    print("=" * 50)

    secret_key = secrets.token_urlsafe(32)
    scoring_token = secrets.token_urlsafe(32)

    print(f"SECRET_KEY={secret_key}")
    print(f"SCORING_API_TOKEN={scoring_token}")

    print("=" * 50)
    print("📝 Copy these values to your .env file")
    print("⚠️  Keep these secrets secure and never commit them to version control!")


if __name__ == "__main__":
    generate_secrets()

#!/usr/bin/env python3
"""
Operator Token Issuer

Mints a control-plane JWT for local development. Turnstile does not manage
operator accounts; any identity provider that signs HS256 tokens with the
same SECRET_KEY works the same way.

Run from the project root:
    python -m scripts.issue_token --owner dev-operator --minutes 120
"""

from datetime import timedelta

import click

from app.core.security import create_access_token


@click.command()
@click.option("--owner", "owner_id", required=True, help="Owner id placed in the sub claim")
@click.option(
    "--minutes",
    default=None,
    type=int,
    help="Lifetime in minutes (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)",
)
def main(owner_id: str, minutes: int | None) -> None:
    """Print a bearer token for the control plane."""
    expires = timedelta(minutes=minutes) if minutes else None
    click.echo(create_access_token({"sub": owner_id}, expires_delta=expires))


if __name__ == "__main__":
    main()

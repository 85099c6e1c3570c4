"""
One-off Gmail OAuth consent flow.

Prints an authorization URL, reads back the code the user pastes and
exchanges it for a refresh token to put in GMAIL_REFRESH_TOKEN.
"""

from typing import Callable, Optional

from google_auth_oauthlib.flow import Flow

from .config import GmailSettings

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
]


def create_flow(settings: GmailSettings) -> Flow:
    """Create an installed-app OAuth flow from the configured client."""
    client_config = {
        "installed": {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [settings.redirect_uri],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=GMAIL_SCOPES,
        redirect_uri=settings.redirect_uri,
    )


def obtain_refresh_token(
    settings: GmailSettings,
    prompt: Callable[[str], str] = input,
    flow: Optional[Flow] = None,
) -> Optional[str]:
    """
    Walk the user through consent and return the refresh token.

    Args:
        settings: Gmail settings with client id and secret
        prompt: Reads the authorization code from the user
        flow: Prebuilt flow (default: created from settings)

    Returns:
        The refresh token, or None if Google did not issue one

    Raises:
        ValueError: If the client id or secret is missing
    """
    if not settings.has_client:
        raise ValueError("GMAIL_CLIENT_ID and GMAIL_CLIENT_SECRET must be set")

    flow = flow or create_flow(settings)
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    print("\nGmail OAuth Setup\n")
    print("1. Open this URL in your browser:")
    print(f"\n{auth_url}\n")
    print("2. Sign in and authorize the application")
    print("3. Copy the authorization code from the page")
    print("4. Paste it below\n")

    code = prompt("Enter the authorization code: ").strip()
    flow.fetch_token(code=code)
    return flow.credentials.refresh_token

"""Gmail API authentication."""

from __future__ import annotations

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from gmail_usage_report.constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES, TOKEN_PATH
from gmail_usage_report.display import console


def load_credentials() -> Credentials:
    """Read-only credentials, from the token cache when it is still usable.

    An expired token is refreshed in place; a missing or unusable one starts
    the installed-app OAuth flow with the client secrets at CREDENTIALS_PATH.
    The resulting token is written back to TOKEN_PATH.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    creds = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES) if TOKEN_PATH.exists() else None

    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    else:
        if not CREDENTIALS_PATH.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {CREDENTIALS_PATH}.\n"
                "Create an OAuth desktop client in the Google Cloud Console "
                "and save its JSON as:\n"
                f"  {CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
        creds = flow.run_local_server(port=0)

    TOKEN_PATH.write_text(creds.to_json())
    return creds


def get_gmail_service() -> Resource:
    """Return an authenticated Gmail v1 service for the current user."""
    return build("gmail", "v1", credentials=load_credentials(), cache_discovery=False)


def check_auth() -> str | None:
    """Report which mailbox the stored credentials reach.

    Returns the address, or None when authentication fails.
    """
    try:
        profile = get_gmail_service().users().getProfile(userId="me").execute()
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Authentication failed:[/red] {exc}")
        return None

    console.print(
        f"[green]Authenticated as[/green] [bold]{profile['emailAddress']}[/bold] "
        f"[dim]({profile.get('threadsTotal', '?')} threads)[/dim]"
    )
    return profile["emailAddress"]

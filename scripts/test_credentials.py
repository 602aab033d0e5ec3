"""
Script to check Nest credentials by running both token exchanges once
and fetching the current event list.
"""

import getpass
import sys

from nestcam.auth.token_exchange import TokenExchangeClient
from nestcam.config.settings import Settings
from nestcam.errors import ExchangeError, NestError
from nestcam.camera import NestCamera

def prompt_missing(config):
    """Ask for any secret that is not configured"""
    nest = config['nest']
    for key, label in [('api_key', 'API key'), ('client_id', 'Client ID'), ('camera_id', 'Camera ID')]:
        if not nest.get(key):
            nest[key] = input(f"{label}: ").strip()
    if not nest.get('refresh_token'):
        nest['refresh_token'] = getpass.getpass("Refresh token: ").strip()

def check_exchanges(client: TokenExchangeClient):
    """Run the refresh and session exchanges, returning the session token or None"""
    print(f"\n🔐 Exchanging refresh token at {client.oauth_url}")
    try:
        access_token = client.exchange_refresh_token()
        print(f"   ✅ SUCCESS! Access token: {access_token[:20]}...")
    except ExchangeError as e:
        print(f"   ❌ {e}")
        return None

    print(f"\n🔐 Exchanging access token at {client.session_token_url}")
    try:
        session_token = client.exchange_session_token(access_token)
        print(f"   ✅ SUCCESS! Session token: {session_token[:20]}...")
    except ExchangeError as e:
        print(f"   ❌ {e}")
        return None
    return session_token

def main():
    settings = Settings()
    config = settings.config
    if not settings.is_complete():
        prompt_missing(config)

    with NestCamera(config) as camera:
        if not check_exchanges(camera.exchange_client):
            print("\n💡 Check that REFRESH_TOKEN, CLIENT_ID and API_KEY belong to the same Google account")
            return 1

        camera.ensure_tokens()
        print("\n📡 Fetching events...")
        try:
            events = camera.get_events()
        except NestError as e:
            print(f"   ❌ {e}")
            return 1
        print(f"   ✅ {len(events)} events returned")
        if events:
            print(f"   Latest: {events[-1]}")

    print("\n🎉 Credentials work")
    return 0

if __name__ == "__main__":
    sys.exit(main())

import logging

from neoaura import config, constants
from neoaura.api.codec import decode, encode
from neoaura.exceptions import AuthenticationError, ConfigurationError, DecodeError
from neoaura.http.client import AuraHttpClient
from neoaura.utils.strings import truncate

LOG = logging.getLogger(__name__)


def fetch_access_token(
    client: AuraHttpClient, client_id: str = None, client_secret: str = None
) -> str:
    """
    Exchanges OAuth client credentials for a bearer token (client credentials grant).

    :param client: the HTTP client
    :param client_id: the client id, defaults to ``AURA_CLIENT_ID``
    :param client_secret: the client secret, defaults to ``AURA_CLIENT_SECRET``
    :return: the access token
    :raises ConfigurationError: if no credentials are given or configured
    :raises AuthenticationError: if the token exchange was rejected
    """
    client_id = client_id or config.AURA_CLIENT_ID
    client_secret = client_secret or config.AURA_CLIENT_SECRET
    if not client_id or not client_secret:
        raise ConfigurationError(
            "missing client credentials, set AURA_CLIENT_ID and AURA_CLIENT_SECRET"
        )

    LOG.debug("requesting access token for client id %s", client_id)
    response = client.send(
        "POST",
        constants.OAUTH_TOKEN_PATH,
        body=encode({"grant_type": "client_credentials"}),
        basic_auth=(client_id, client_secret),
    )
    try:
        tree = decode(response.body)
    except DecodeError:
        tree = {}

    token = tree.get("access_token")
    if response.status_code != 200 or not token:
        raise AuthenticationError(
            f"error during authentication {response.status_code} : "
            f"{truncate(response.text, 200)} - client id: {client_id}",
            response.status_code,
        )
    return token

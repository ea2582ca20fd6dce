"""HTTP client for the server's control-plane REST API.

Every method is a single blocking request with the configured timeout.
Non-2xx responses raise ``requests.HTTPError``; an unresponsive server
raises ``requests.Timeout``.  Nothing is retried.
"""

import logging
import threading
from typing import Any

import requests

from ..config import Config
from ..sync.models import (
    AuthUser,
    Channel,
    ChannelTree,
    ContextActionScope,
    ServerInfo,
    User,
)

logger = logging.getLogger(__name__)

# Wire names of the user fields that can be changed by update_user_state().
_USER_FIELD_ALIASES = {
    "priority_speaker": "prioritySpeaker",
    "self_mute": "selfMute",
    "self_deaf": "selfDeaf",
}


class MumbleClient:
    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.base_url = config.url.rstrip("/")

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.verify = not self.config.insecure
        return session

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send one request and raise on a non-2xx status."""
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        response = self._get_session().request(
            method, url, timeout=self.config.timeout, **kwargs
        )
        response.raise_for_status()
        return response

    def _get_json(self, path: str, **kwargs: Any) -> Any:
        return self._request("GET", path, **kwargs).json()

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    def get_server(self) -> ServerInfo:
        """Get the server summary (running state, user count, uptime)."""
        return ServerInfo.model_validate(self._get_json("/"))

    def get_tree(self) -> ChannelTree:
        """Get the channel tree with the users in each channel."""
        return ChannelTree.model_validate(self._get_json("/tree"))

    def get_bans(self) -> list[dict[str, Any]]:
        return list(self._get_json("/bans").values())

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_users(self) -> list[User]:
        """Fetch every connected user."""
        data = self._get_json("/users")
        return [User.model_validate(u) for u in data.values()]

    def update_user_state(self, session: int, **fields: Any) -> None:
        """Change mutable fields of the user with the given session.

        Args:
            session: Session id of the target user.
            **fields: Field values, e.g. ``mute=True`` or ``channel=3``.
                Python field names are translated to their wire names.
        """
        payload = {_USER_FIELD_ALIASES.get(k, k): v for k, v in fields.items()}
        self._request("POST", f"/users/{session}", json=payload)

    def send_user_message(self, session: int, message: str) -> None:
        self._request(
            "POST",
            "/message/user",
            data={"session": session, "message": message},
        )

    def kick_user(self, session: int, reason: str = "") -> None:
        self._request("DELETE", f"/users/{session}", json={"reason": reason})

    def get_certificate_list(self, session: int) -> str:
        return self._request(
            "GET", f"/users/{session}/certificateList"
        ).text

    def add_user_to_group(self, session: int, channel: int, group: str) -> None:
        self._request(
            "POST",
            f"/users/{session}/groups/add",
            data={"channel": channel, "group": group},
        )

    def remove_user_from_group(
        self, session: int, channel: int, group: str
    ) -> None:
        self._request(
            "POST",
            f"/users/{session}/groups/remove",
            data={"channel": channel, "group": group},
        )

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def get_channels(self) -> list[Channel]:
        """Fetch every channel."""
        data = self._get_json("/channels")
        return [Channel.model_validate(c) for c in data.values()]

    def update_channel_state(self, channel_id: int, **fields: Any) -> None:
        """Change mutable fields (name, description, position, parent, links)."""
        if "links" in fields:
            fields["links"] = list(fields["links"])
        self._request("POST", f"/channels/{channel_id}", json=fields)

    def create_channel(self, name: str, parent: int = 0) -> Channel:
        """Create a channel under ``parent`` and return it."""
        response = self._request(
            "POST", "/channels", data={"name": name, "parent": parent}
        )
        return Channel.model_validate(response.json())

    def remove_channel(self, channel_id: int) -> None:
        self._request("DELETE", f"/channels/{channel_id}")

    def send_channel_message(
        self, channel_id: int, message: str, tree: bool = False
    ) -> None:
        """Send a message to a channel, and its subchannels if ``tree``."""
        self._request(
            "POST",
            "/message/channel",
            data={
                "channel": channel_id,
                "tree": str(tree).lower(),
                "message": message,
            },
        )

    def get_acl(self, channel_id: int) -> Any:
        """Raw ACL document of a channel; not interpreted."""
        return self._get_json(f"/acl/{channel_id}")

    # ------------------------------------------------------------------
    # Auth cache (pass-through)
    # ------------------------------------------------------------------

    def get_auth_users(self) -> list[AuthUser]:
        data = self._get_json("/auth")
        return [AuthUser.model_validate(u) for u in data.values()]

    def update_auth_users(self, users: list[AuthUser]) -> None:
        self._request(
            "POST",
            "/auth",
            json=[u.model_dump(by_alias=True) for u in users],
        )

    def delete_auth_user(self, username: str) -> None:
        self._request("DELETE", "/auth", params={"username": username})

    # ------------------------------------------------------------------
    # Server configuration
    # ------------------------------------------------------------------

    def get_config(self) -> dict[str, str]:
        return self._get_json("/conf")

    def get_default_config(self) -> dict[str, str]:
        return self._get_json("/conf/default")

    def get_conf_key(self, key: str) -> str:
        return self._get_json(f"/conf/{key}")

    def set_conf_key(self, key: str, value: str) -> None:
        self._request("POST", f"/conf/{key}", data={"value": value})

    # ------------------------------------------------------------------
    # Other
    # ------------------------------------------------------------------

    def send_welcome_message(self, session_ids: list[int]) -> None:
        """Resend the welcome message to the given sessions.

        Servers that lack this capability answer with HTTP 500; that is
        logged and otherwise ignored.  Other failures propagate.
        """
        try:
            self._request(
                "POST",
                "/sendwelcomemessage",
                json={"sessionids": list(session_ids)},
            )
        except requests.HTTPError as exc:
            if exc.response is not None and exc.response.status_code == 500:
                logger.error(
                    "send_welcome_message is not supported on this server"
                )
                return
            raise

    def add_context_action(
        self,
        session: int,
        action: str,
        text: str,
        scope: ContextActionScope,
    ) -> None:
        """Declare a context action for one user's client."""
        self._request(
            "POST",
            "/context",
            json={
                "session": session,
                "action": action,
                "text": text,
                "scope": int(scope),
            },
        )

    def set_superuser_password(self, password: str) -> None:
        self._request(
            "POST", "/setSuperuserPassword", data={"password": password}
        )

    def get_listener_volume_adjustment(self, session: int, channel: int) -> float:
        return float(
            self._get_json(f"/listenervolumeadjustment/{channel}/{session}")
        )

    def set_listener_volume_adjustment(
        self, session: int, channel: int, adjustment: float
    ) -> None:
        self._request(
            "POST",
            f"/listenervolumeadjustment/{channel}/{session}",
            data={"adjustment": adjustment},
        )

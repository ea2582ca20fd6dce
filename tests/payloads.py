"""Wire payload builders shared by the sync tests."""


def user_state(userid: int = 7, session: int = 70, **fields) -> dict:
    """Wire representation of a user, as the server sends it."""
    state = {
        "session": session,
        "userid": userid,
        "mute": False,
        "deaf": False,
        "suppress": False,
        "prioritySpeaker": False,
        "selfMute": False,
        "selfDeaf": False,
        "recording": False,
        "channel": 0,
        "name": f"user{userid}",
        "comment": "",
        "onlinesecs": 10,
        "bytespersec": 0,
        "idlesecs": 1,
        "udpPing": 12.5,
        "tcpPing": 14.0,
        "address": [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 255, 255, 127, 0, 0, 1],
    }
    state.update(fields)
    return state


def channel_state(channel_id: int = 0, **fields) -> dict:
    """Wire representation of a channel."""
    state = {
        "id": channel_id,
        "name": "Root" if channel_id == 0 else f"chan{channel_id}",
        "parent": -1 if channel_id == 0 else 0,
        "links": [],
        "description": "",
        "temporary": False,
        "position": 0,
    }
    state.update(fields)
    return state


def event(state: dict, message: str | None = None) -> dict:
    """Wrap a state in the entity event envelope."""
    return {"state": state, "message": message}

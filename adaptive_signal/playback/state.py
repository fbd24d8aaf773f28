from enum import Enum


class PlaybackState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


# from-states accepted by each transition
TRANSITIONS = {
    "start": {PlaybackState.IDLE, PlaybackState.STOPPED},
    "pause": {PlaybackState.RUNNING},
    "resume": {PlaybackState.PAUSED},
    "stop": {PlaybackState.RUNNING, PlaybackState.PAUSED},
    "step": {PlaybackState.PAUSED},
}

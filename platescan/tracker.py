"""Follows plate readings across video frames and reports track events."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from .geometry import PointFixed, PointFloat

DELETE_TIME = 6000
GUESS_WINDOW = 50
MAX_MATCH_SCORE = 29.0
MISSING_CHAR_PENALTY = 15
SIZE_CHANGE_FACTOR = 1.1
STOPPED_INTERVAL = 500
STOPPED_MAX_DIST = 0.05

_EMPTY_FRAME = (PointFloat(), PointFloat(), PointFloat(), PointFloat())


class TrackEventType(Enum):
    """What happened to a track in the latest frame."""

    START = 0
    END = 1
    VALID = 2
    INCOMING = 3
    OUTGOING = 4
    STOPPED = 5
    GUESS_CHANGED = 6


@dataclass(frozen=True)
class PlateReading:
    """One plate found in one image by the reader."""

    text: str
    x: int
    y: int
    char_height: float
    frame: tuple[PointFloat, PointFloat, PointFloat, PointFloat] = _EMPTY_FRAME


@dataclass(frozen=True)
class TrackEvent:
    """A report about a track, carrying the state of its last plate."""

    type: TrackEventType
    track_id: int
    plate_id: int
    valid: bool
    guess: str
    frame: tuple[PointFloat, PointFloat, PointFloat, PointFloat]
    is_incoming: bool
    is_outgoing: bool
    last_plate_timestamp: int


@dataclass
class TrackPlate:
    """A plate reading as stored in a track."""

    center: PointFixed
    text: str
    timestamp: int
    char_size: float
    frame: tuple[PointFloat, PointFloat, PointFloat, PointFloat]
    plate_id: int = 0

    @staticmethod
    def from_reading(reading: PlateReading, timestamp: int) -> TrackPlate:
        """Build a track plate from a reader result seen at timestamp."""
        return TrackPlate(
            center=PointFixed(reading.x << 16, reading.y << 16),
            text=reading.text,
            timestamp=timestamp,
            char_size=reading.char_height,
            frame=tuple(reading.frame),
        )


def _per_char(distance: int, char_size: float) -> float:
    value = distance / 65536.0
    if char_size == 0:
        return math.inf if value else 0.0
    return value / char_size


def _text_miss_score(text: str, guess: str) -> int:
    score = 0
    for index, char in enumerate(text):
        best = MISSING_CHAR_PENALTY
        for other_index, other in enumerate(guess):
            if other == char:
                best = min(best, abs(other_index - index))
                if best == 0:
                    break
        score += best
    surplus = len(guess) - len(text)
    if surplus > 0:
        score += MISSING_CHAR_PENALTY * surplus
    return score


@dataclass
class Track:
    """The plates believed to belong to one vehicle, with derived state."""

    track_id: int
    plates: list[TrackPlate] = field(default_factory=list)
    valid: bool = False
    total_time: int = 0
    validated_timestamp: int | None = None
    guess_change_timestamp: int | None = None
    incoming_timestamp: int | None = None
    outgoing_timestamp: int | None = None
    stopped_timestamp: int | None = None
    start_timestamp: int | None = None
    last_active_time: int | None = None
    before_delete: bool = False
    guesses: list[str] = field(default_factory=lambda: ["", ""])
    guess_match_count: int = 0
    valid_event_generated: bool = False
    last_valid_event_timestamp: int | None = None
    event_resend_count: int = 0

    def add_plate(self, plate: TrackPlate) -> None:
        """Append plate and refresh the derived state."""
        self.plates.append(plate)
        self.last_active_time = plate.timestamp
        if len(self.plates) == 1:
            self.start_timestamp = plate.timestamp
        self.update_stats()

    def update_stats(self) -> None:
        """Recompute the best guesses and the movement state."""
        plates = self.plates
        if not plates:
            return
        self.total_time = 0 if len(plates) < 2 else plates[-1].timestamp - plates[0].timestamp

        counts: dict[str, int] = {}
        for plate in plates[-GUESS_WINDOW:]:
            counts[plate.text] = counts.get(plate.text, 0) + 1

        best = [(0, ""), (0, "")]
        for text, count in counts.items():
            if count > best[1][0]:
                best[1] = (count, text)
                if best[1][0] > best[0][0]:
                    best[0], best[1] = best[1], best[0]
        self.guess_match_count = best[0][0]

        if self.guesses[0] != best[0][1]:
            self.guesses[0] = best[0][1]
            self.guess_change_timestamp = self.last_active_time
        self.guesses[1] = "" if best[1][0] == 0 else best[1][1]

        if len(plates) == 1:
            return
        last = plates[-1]
        earlier = plates[:-1]

        if self.incoming_timestamp is None:
            threshold = last.char_size / SIZE_CHANGE_FACTOR
            if any(p.char_size < threshold for p in earlier):
                self.incoming_timestamp = self.last_active_time

        if self.outgoing_timestamp is None:
            threshold = last.char_size * SIZE_CHANGE_FACTOR
            if any(p.char_size > threshold for p in earlier):
                self.outgoing_timestamp = self.last_active_time

        if self.stopped_timestamp is None:
            in_place = True
            interval_checked = False
            for plate in reversed(earlier):
                dx = abs(last.center.x - plate.center.x)
                dy = abs(last.center.y - plate.center.y)
                if (_per_char(dx, last.char_size) > STOPPED_MAX_DIST
                        or _per_char(dy, last.char_size) > STOPPED_MAX_DIST):
                    in_place = False
                if self.last_active_time - plate.timestamp >= STOPPED_INTERVAL:
                    interval_checked = True
                if not in_place or interval_checked:
                    break
            if in_place and interval_checked:
                self.stopped_timestamp = self.last_active_time

    def check_validation(self, timestamp: int) -> None:
        """Mark the track valid once its readings are consistent enough."""
        if self.validated_timestamp is not None or not self.plates:
            return
        count = self.guess_match_count
        moving = self.incoming_timestamp is not None or self.outgoing_timestamp is not None
        if ((timestamp - self.plates[0].timestamp > 2000 and count >= 2)
                or (timestamp - self.plates[-1].timestamp > 500 and count >= 2)
                or (count >= 3 and moving)):
            self.valid = True
            self.validated_timestamp = self.last_active_time

    def match_score(self, plate: TrackPlate) -> float:
        """How well plate's text fits this track; positive means a candidate."""
        if plate.timestamp == self.last_active_time:
            return -1.0
        min_miss = 9999
        for guess in self.guesses:
            min_miss = min(min_miss, _text_miss_score(plate.text, guess))
            if min_miss == 0:
                return MAX_MATCH_SCORE
        for guess in self.guesses:
            if len(plate.text) < len(guess) and guess.endswith(plate.text):
                min_miss = int(MAX_MATCH_SCORE) - 1
        return MAX_MATCH_SCORE - min_miss


@dataclass
class _Match:
    plate_index: int
    track_index: int
    score: float


class PlateTracker:
    """Assigns readings to tracks frame by frame and emits events."""

    def __init__(self) -> None:
        self.tracks: list[Track] = []
        self.events: list[TrackEvent] = []
        self._next_plate_id = 0
        self._next_track_id = 0
        self._last_image_timestamp: int | None = None
        self.event_resend_enabled = False
        self.event_resend_delay = 0
        self.event_resend_max_count = 0

    @property
    def event_resend(self) -> tuple[bool, int, int]:
        """The resend switch, delay and maximum count."""
        return self.event_resend_enabled, self.event_resend_delay, self.event_resend_max_count

    def set_event_resend(self, enabled: bool, delay: int, max_count: int) -> None:
        """Configure repeating VALID events for tracks that stay active."""
        self.event_resend_enabled = enabled
        self.event_resend_delay = delay
        self.event_resend_max_count = max_count

    def reset_tracks(self) -> None:
        """Forget every track."""
        self.tracks.clear()

    def _new_plate(self, reading: PlateReading, timestamp: int) -> TrackPlate:
        plate = TrackPlate.from_reading(reading, timestamp)
        plate.plate_id = self._next_plate_id
        self._next_plate_id += 1
        return plate

    def track_plates(self, timestamp: int, plates: list[PlateReading]) -> list[TrackEvent]:
        """Process the readings of one frame and return the resulting events."""
        self.tracks = [t for t in self.tracks if not t.before_delete]

        matches: list[_Match] = []
        for plate_index, reading in enumerate(plates):
            candidate = TrackPlate.from_reading(reading, timestamp)
            found = False
            for track_index, track in enumerate(self.tracks):
                score = track.match_score(candidate)
                if score > 0.0:
                    matches.append(_Match(plate_index, track_index, score))
                    found = True
            if not found:
                matches.append(_Match(plate_index, -1, 0.0))

        while True:
            best: _Match | None = None
            for match in matches:
                if match.score > (best.score if best else 0.0):
                    best = match
            if best is None:
                break
            plate_index, track_index = best.plate_index, best.track_index
            self.tracks[track_index].add_plate(self._new_plate(plates[plate_index], timestamp))
            matches = [m for m in matches
                       if m.plate_index != plate_index and m.track_index != track_index]

        for track in self.tracks:
            track.check_validation(timestamp)

        for match in matches:
            track = Track(self._next_track_id)
            self._next_track_id += 1
            track.add_plate(self._new_plate(plates[match.plate_index], timestamp))
            self.tracks.append(track)

        self._last_image_timestamp = timestamp
        self._set_before_delete()
        self._create_events()
        return list(self.events)

    def _set_before_delete(self) -> None:
        for track in self.tracks:
            if self._last_image_timestamp - track.last_active_time >= DELETE_TIME:
                track.before_delete = True

    @staticmethod
    def _event(kind: TrackEventType, track: Track) -> TrackEvent:
        last = track.plates[-1]
        return TrackEvent(
            type=kind,
            track_id=track.track_id,
            plate_id=last.plate_id,
            valid=track.valid,
            guess=track.guesses[0],
            frame=last.frame,
            is_incoming=track.incoming_timestamp is not None,
            is_outgoing=track.outgoing_timestamp is not None,
            last_plate_timestamp=last.timestamp,
        )

    def _changed_now(self, track: Track, moment: int | None) -> bool:
        now = self._last_image_timestamp
        return track.valid and moment is not None and (
            moment == now
            or track.guess_change_timestamp == now
            or track.validated_timestamp == now
        )

    def _create_events(self) -> None:
        now = self._last_image_timestamp
        newest_first = list(reversed(self.tracks))
        events: list[TrackEvent] = []

        events.extend(self._event(TrackEventType.START, t)
                      for t in newest_first if t.start_timestamp == now)
        events.extend(self._event(TrackEventType.END, t)
                      for t in newest_first if t.before_delete)

        for track in newest_first:
            if track.validated_timestamp is not None and not track.valid_event_generated:
                events.append(self._event(TrackEventType.VALID, track))
                track.valid_event_generated = True
                track.last_valid_event_timestamp = track.plates[-1].timestamp
                track.event_resend_count = 0

        if self.event_resend_enabled:
            for track in newest_first:
                if (track.valid_event_generated
                        and track.event_resend_count < self.event_resend_max_count
                        and track.last_valid_event_timestamp + self.event_resend_delay
                        <= track.last_active_time):
                    events.append(self._event(TrackEventType.VALID, track))
                    track.last_valid_event_timestamp = track.plates[-1].timestamp
                    track.event_resend_count += 1

        events.extend(self._event(TrackEventType.INCOMING, t) for t in newest_first
                      if self._changed_now(t, t.incoming_timestamp))
        events.extend(self._event(TrackEventType.OUTGOING, t) for t in newest_first
                      if self._changed_now(t, t.outgoing_timestamp))
        events.extend(self._event(TrackEventType.STOPPED, t) for t in newest_first
                      if self._changed_now(t, t.stopped_timestamp))
        self.events = events
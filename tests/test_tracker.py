from platescan.geometry import PointFloat, to_fixed
from platescan.tracker import (
    PlateReading,
    PlateTracker,
    Track,
    TrackEventType,
    TrackPlate,
)


def reading(text="XX000", x=100, y=50, size=20.0):
    return PlateReading(text=text, x=x, y=y, char_height=size)


def plate(text, timestamp, size=20.0):
    return TrackPlate.from_reading(reading(text, size=size), timestamp)


def types(events):
    return [e.type for e in events]


def test_from_reading_copies_fields():
    frame = (PointFloat(1.0, 2.0), PointFloat(3.0, 4.0), PointFloat(5.0, 6.0), PointFloat(7.0, 8.0))
    r = PlateReading(text="QQ111", x=12, y=34, char_height=25.0, frame=frame)
    p = TrackPlate.from_reading(r, 777)
    assert p.center.x == to_fixed(12)
    assert p.center.y == to_fixed(34)
    assert p.text == "QQ111"
    assert p.timestamp == 777
    assert p.char_size == 25.0
    assert p.frame == frame


def test_match_score_exact_text():
    track = Track(0)
    track.add_plate(plate("XX000", 0))
    assert track.match_score(plate("XX000", 100)) == 29.0


def test_match_score_same_timestamp_is_negative():
    track = Track(0)
    track.add_plate(plate("XX000", 0))
    assert track.match_score(plate("XX000", 0)) == -1.0


def test_match_score_unrelated_text_is_not_candidate():
    track = Track(0)
    track.add_plate(plate("ABC", 0))
    assert track.match_score(plate("XYZ", 100)) <= 0.0


def test_update_stats_best_guesses():
    track = Track(0)
    for ts, text in enumerate(["ABC", "ABD", "ABC"]):
        track.add_plate(plate(text, ts * 10))
    assert track.guesses == ["ABC", "ABD"]
    assert track.guess_match_count == 2


def test_update_stats_tie_keeps_first_seen():
    track = Track(0)
    track.add_plate(plate("A", 0))
    track.add_plate(plate("B", 10))
    assert track.guesses == ["A", "B"]
    assert track.guess_match_count == 1


def test_first_reading_starts_track():
    tracker = PlateTracker()
    events = tracker.track_plates(0, [reading()])
    assert types(events) == [TrackEventType.START]
    assert events[0].track_id == 0
    assert events[0].guess == "XX000"
    assert events[0].valid is False
    assert len(tracker.tracks) == 1


def test_same_plate_stays_in_one_track():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading()])
    events = tracker.track_plates(1000, [reading()])
    assert events == []
    assert len(tracker.tracks) == 1
    assert [p.plate_id for p in tracker.tracks[0].plates] == [0, 1]


def test_validation_and_stopped_events():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading()])
    tracker.track_plates(1000, [reading()])
    events = tracker.track_plates(2100, [reading()])
    assert types(events) == [TrackEventType.VALID, TrackEventType.STOPPED]
    assert all(e.valid for e in events)
    assert events[0].last_plate_timestamp == 2100
    # The valid event is sent only once.
    assert TrackEventType.VALID not in types(tracker.track_plates(2200, [reading()]))


def test_incoming_event():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading(size=20.0)])
    assert tracker.track_plates(100, [reading(size=30.0)]) == []
    events = tracker.track_plates(200, [reading(size=40.0)])
    assert types(events) == [TrackEventType.VALID, TrackEventType.INCOMING]
    assert events[1].is_incoming is True
    assert events[1].is_outgoing is False


def test_outgoing_event():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading(size=40.0)])
    tracker.track_plates(100, [reading(size=30.0)])
    events = tracker.track_plates(200, [reading(size=20.0)])
    assert types(events) == [TrackEventType.VALID, TrackEventType.OUTGOING]
    assert events[1].is_outgoing is True


def test_track_ends_and_is_deleted():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading()])
    assert tracker.track_plates(5999, []) == []
    events = tracker.track_plates(6000, [])
    assert types(events) == [TrackEventType.END]
    tracker.track_plates(6100, [])
    assert tracker.tracks == []


def test_two_plates_make_two_tracks():
    tracker = PlateTracker()
    events = tracker.track_plates(0, [reading("AAA111"), reading("ZZZ999", x=400)])
    assert types(events) == [TrackEventType.START, TrackEventType.START]
    assert {e.track_id for e in events} == {0, 1}
    assert {e.guess for e in events} == {"AAA111", "ZZZ999"}


def test_best_match_joins_track_other_starts_new():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading("ABC123")])
    events = tracker.track_plates(100, [reading("ABC123"), reading("XYZ")])
    assert len(tracker.tracks) == 2
    assert [p.text for p in tracker.tracks[0].plates] == ["ABC123", "ABC123"]
    assert types(events) == [TrackEventType.START]
    assert events[0].guess == "XYZ"


def test_event_resend():
    tracker = PlateTracker()
    tracker.set_event_resend(True, 0, 1)
    assert tracker.event_resend == (True, 0, 1)
    tracker.track_plates(0, [reading()])
    tracker.track_plates(1000, [reading()])
    events = tracker.track_plates(2100, [reading()])
    assert types(events).count(TrackEventType.VALID) == 2
    later = tracker.track_plates(2200, [reading()])
    assert TrackEventType.VALID not in types(later)


def test_reset_tracks():
    tracker = PlateTracker()
    tracker.track_plates(0, [reading(), reading("OTHER", x=300)])
    tracker.reset_tracks()
    assert tracker.tracks == []
    events = tracker.track_plates(100, [reading()])
    assert types(events) == [TrackEventType.START]
    assert events[0].track_id == 2


def test_check_validation_needs_matches():
    track = Track(0)
    track.add_plate(plate("XX000", 0))
    track.check_validation(5000)
    assert track.valid is False
    assert track.validated_timestamp is None
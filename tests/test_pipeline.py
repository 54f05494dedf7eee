import threading

import pytest

from conftest import make_image_bytes
from geostamp.exceptions import RecognitionError
from geostamp.exif_codec import ExifCodec
from geostamp.models import BatchItem, DecimalCoordinate, ItemStatus
from geostamp.pipeline import BatchPipeline
from geostamp.recognition import RecognitionResult, TextRecognizer
from geostamp.stamp import StampRenderer


class FakeRecognizer(TextRecognizer):
    """Returns canned text per image, keyed by the image bytes."""

    def __init__(self, texts, errors=None, steps=(0, 30, 60, 100)):
        self.texts = texts
        self.errors = errors or {}
        self.steps = steps
        self.calls = []

    def recognize(self, image_bytes, progress_callback=None):
        self.calls.append(image_bytes)
        if image_bytes in self.errors:
            raise self.errors[image_bytes]
        for step in self.steps:
            if progress_callback:
                progress_callback(step)
        return RecognitionResult(self.texts.get(image_bytes, ""), 0.9)


@pytest.fixture
def images():
    return [make_image_bytes(color=(i * 40, 10, 10)) for i in range(3)]


@pytest.fixture
def renderer():
    return StampRenderer(font_path="/nonexistent/font.ttf")


def _items(images):
    return [BatchItem(name=f"foto_{i}.jpg", data=data) for i, data in enumerate(images)]


class TestGeotag:
    def test_partial_failure_keeps_going(self, images):
        recognizer = FakeRecognizer(
            {
                images[0]: "18° 27' 30.5\" N, 69° 57' 21.3\" W",
                images[1]: "sin coordenadas",
                images[2]: "S 33°30'0\" E 151°15'0\"",
            }
        )
        result = BatchPipeline(recognizer=recognizer).geotag(_items(images))

        assert result.summary == "2/3"
        assert [item.status for item in result.items] == [
            ItemStatus.SUCCEEDED,
            ItemStatus.FAILED,
            ItemStatus.SUCCEEDED,
        ]
        assert result.items[1].error_kind == "no_coordinate"
        assert result.items[2].coordinate == DecimalCoordinate(-33.5, 151.25)
        assert len(recognizer.calls) == 3

    def test_output_carries_gps(self, images):
        recognizer = FakeRecognizer({images[0]: "18° 27' 30.5\" N, 69° 57' 21.3\" W"})
        result = BatchPipeline(recognizer=recognizer).geotag(_items(images[:1]))

        item = result.items[0]
        metadata = ExifCodec().read(item.output)
        assert metadata.gps.coordinate.latitude == pytest.approx(18.458472, abs=1e-4)
        assert metadata.gps.coordinate.longitude == pytest.approx(-69.955917, abs=1e-4)
        assert item.original == images[0]
        assert item.recognized_text.startswith("18°")

    def test_recognizer_failure_is_recorded(self, images):
        recognizer = FakeRecognizer({}, errors={images[0]: RecognitionError("motor caído")})
        result = BatchPipeline(recognizer=recognizer).geotag(_items(images[:1]))

        assert result.items[0].status == ItemStatus.FAILED
        assert result.items[0].error_kind == "recognition_failed"
        assert "motor caído" in result.items[0].error_message

    def test_unexpected_error_is_recorded(self, images):
        recognizer = FakeRecognizer({}, errors={images[0]: RuntimeError("boom")})
        result = BatchPipeline(recognizer=recognizer).geotag(_items(images[:2]))

        assert result.items[0].error_kind == "unexpected"
        assert result.items[1].status == ItemStatus.FAILED
        assert result.items[1].error_kind == "no_coordinate"

    def test_requires_recognizer(self, images):
        with pytest.raises(ValueError):
            BatchPipeline().geotag(_items(images))

    def test_empty_batch(self):
        result = BatchPipeline(recognizer=FakeRecognizer({})).geotag([])
        assert result.total == 0
        assert result.summary == "0/0"


class TestProgress:
    def test_item_progress_is_ordered_and_monotonic(self, images):
        recognizer = FakeRecognizer({}, steps=(0, 40, 20, 150, -5))
        events = []
        BatchPipeline(recognizer=recognizer).geotag(
            _items(images), item_progress_callback=lambda i, pct: events.append((i, pct))
        )

        indexes = [i for i, _ in events]
        assert indexes == sorted(indexes)
        for idx in range(3):
            values = [pct for i, pct in events if i == idx]
            assert values == sorted(values)
            assert all(0 <= v <= 100 for v in values)
            assert values[-1] == 100

    def test_batch_progress_messages(self, images):
        calls = []
        BatchPipeline(recognizer=FakeRecognizer({})).geotag(
            _items(images), progress_callback=lambda c, t, m: calls.append((c, t, m))
        )
        assert [(c, t) for c, t, _ in calls] == [(1, 3), (2, 3), (3, 3)]
        assert "foto_0.jpg" in calls[0][2]


class TestCancellation:
    def test_stop_event_cancels_remaining(self, images):
        stop = threading.Event()

        class StoppingRecognizer(FakeRecognizer):
            def recognize(self, image_bytes, progress_callback=None):
                stop.set()
                return super().recognize(image_bytes, progress_callback)

        recognizer = StoppingRecognizer({images[0]: "N 10°0'0\" W 20°0'0\""})
        result = BatchPipeline(recognizer=recognizer).geotag(_items(images), stop_event=stop)

        assert result.items[0].status == ItemStatus.SUCCEEDED
        assert [item.status for item in result.items[1:]] == [ItemStatus.CANCELLED] * 2
        assert result.cancelled == 2
        assert len(recognizer.calls) == 1


class TestStamp:
    def test_mixed_batch(self, gps_jpeg, plain_jpeg, renderer):
        items = [
            BatchItem("con_gps.jpg", gps_jpeg),
            BatchItem("sin_gps.jpg", plain_jpeg),
            BatchItem("basura.jpg", b"not an image at all"),
        ]
        result = BatchPipeline(renderer=renderer).stamp(items)

        assert result.summary == "1/3"
        ok, no_gps, garbage = result.items
        assert ok.status == ItemStatus.SUCCEEDED
        assert ok.output[:2] == b"\xff\xd8"
        assert ok.timestamp == "2024:03:05 14:07:09"
        assert ok.gps.altitude == pytest.approx(35.6)
        assert no_gps.error_kind == "no_gps"
        assert garbage.error_kind == "input_unreadable"
        assert [i.name for i in result.successful_items()] == ["con_gps.jpg"]

    def test_stamp_progress_reaches_100(self, gps_jpeg, renderer):
        events = []
        BatchPipeline(renderer=renderer).stamp(
            [BatchItem("a.jpg", gps_jpeg)], item_progress_callback=lambda i, pct: events.append(pct)
        )
        assert events == [50, 100]

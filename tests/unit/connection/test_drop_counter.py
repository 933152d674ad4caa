from stingray_link.connection import DropCounter


class TestDropCounter:
    def test_total(self):
        counter = DropCounter()
        counter.increment_malformed_frame()
        counter.increment_binary_frame()
        counter.increment_unsent_message()
        counter.increment_unsent_message()

        assert counter.total == 4

    def test_reset_returns_snapshot(self):
        counter = DropCounter()
        counter.increment_malformed_frame()

        snapshot = counter.reset()

        assert snapshot.malformed_frame == 1
        assert snapshot.has_drops
        assert counter.total == 0
        assert counter.reset().has_drops is False

from biblestudy.services.sequencing import RequestSequencer


def test_newest_ticket_wins():
    sequencer = RequestSequencer()
    first = sequencer.next_ticket()
    second = sequencer.next_ticket()

    assert sequencer.try_apply(second) is True
    assert sequencer.try_apply(first) is False
    assert sequencer.last_applied == second


def test_in_order_results_all_apply():
    sequencer = RequestSequencer()

    for _ in range(3):
        assert sequencer.try_apply(sequencer.next_ticket()) is True


def test_invalidate_discards_outstanding_tickets():
    sequencer = RequestSequencer()
    pending = sequencer.next_ticket()

    sequencer.invalidate()

    assert sequencer.try_apply(pending) is False
    assert sequencer.try_apply(sequencer.next_ticket()) is True

from __future__ import annotations

import random
import unittest

from tambola.errors import AlreadyDrawn, ChannelError, GameComplete, PoolExhausted
from tambola.game import (
    AnnouncementMode,
    GameEngine,
    GameState,
    Participant,
    PrizeCategory,
    WINNER_LIMITS,
    ordinal,
)
from tambola.sync import MemoryChannel
from tambola.tickets import Ticket

from ticket_fixtures import GRID_A, GRID_B, GRID_SHORT, entry, numbers_of


class GameEngineTestCase(unittest.TestCase):
    def make_engine(self, roster=None, **kwargs) -> GameEngine:
        kwargs.setdefault("rng", random.Random(42))
        return GameEngine(roster or [], **kwargs)

    def draw_all(self, engine: GameEngine, numbers) -> list:
        return [engine.draw_specific(n) for n in numbers]


class DrawTests(GameEngineTestCase):
    def test_initial_state(self) -> None:
        engine = self.make_engine()
        self.assertEqual(engine.state, GameState.NOT_STARTED)
        snapshot = engine.snapshot()
        self.assertIsNone(snapshot.current_number)
        self.assertEqual(snapshot.draw_history, ())
        self.assertEqual(snapshot.remaining, 90)
        self.assertEqual(set(snapshot.winners), set(PrizeCategory))

    def test_ninety_draws_visit_every_number_once(self) -> None:
        engine = self.make_engine()
        drawn = [engine.draw_next().number for _ in range(90)]
        self.assertEqual(sorted(drawn), list(range(1, 91)))
        self.assertEqual(list(engine.draw_history), drawn)
        self.assertEqual(engine.state, GameState.EXHAUSTED)

        with self.assertRaises(PoolExhausted):
            engine.draw_next()
        self.assertEqual(len(engine.draw_history), 90)

    def test_last_draw_signals_halt(self) -> None:
        engine = self.make_engine()
        results = [engine.draw_next() for _ in range(90)]
        self.assertFalse(any(r.halt for r in results[:-1]))
        self.assertTrue(results[-1].halt)

    def test_state_moves_to_in_progress(self) -> None:
        engine = self.make_engine()
        result = engine.draw_next()
        self.assertEqual(result.snapshot.state, GameState.IN_PROGRESS)
        self.assertEqual(result.snapshot.current_number, result.number)
        self.assertEqual(result.snapshot.remaining, 89)

    def test_draw_specific_twice_raises_already_drawn(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        engine.draw_specific(42)
        before = engine.snapshot()
        marks_before = list(engine.participants[0].marked_numbers)

        with self.assertRaises(AlreadyDrawn) as ctx:
            engine.draw_specific(42)
        self.assertEqual(ctx.exception.number, 42)
        self.assertEqual(engine.snapshot(), before)
        self.assertEqual(len(engine.draw_history), 1)
        self.assertEqual(engine.participants[0].marked_numbers, marks_before)

    def test_draw_specific_removes_number_from_pool(self) -> None:
        engine = self.make_engine()
        engine.draw_specific(17)
        drawn = [engine.draw_next().number for _ in range(89)]
        self.assertNotIn(17, drawn)
        self.assertEqual(sorted(drawn + [17]), list(range(1, 91)))

    def test_draw_specific_rejects_bad_numbers(self) -> None:
        engine = self.make_engine()
        for bad in (0, 91, -5):
            with self.assertRaises(ValueError):
                engine.draw_specific(bad)
        with self.assertRaises(TypeError):
            engine.draw_specific("12")  # type: ignore[arg-type]
        self.assertEqual(engine.draw_history, ())

    def test_independent_engines(self) -> None:
        first = self.make_engine([entry(1, "Asha", GRID_A)])
        second = self.make_engine([entry(1, "Asha", GRID_A)])
        first.draw_specific(4)
        self.assertEqual(second.draw_history, ())
        self.assertEqual(second.participants[0].marked_numbers, [])


class MarkingTests(GameEngineTestCase):
    def test_marks_only_tickets_holding_the_number(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A), entry(2, "Bilal", GRID_B)])
        engine.draw_specific(42)
        engine.draw_specific(11)
        engine.draw_specific(50)
        asha, bilal = engine.participants
        self.assertEqual(asha.marked_numbers, [42])
        self.assertEqual(bilal.marked_numbers, [11])

    def test_top_line_only_when_row_is_fully_marked(self) -> None:
        grid = [
            [None, None, 3, None, 15, None, None, None, 82],
            [None, 44, None, None, None, None, None, None, None],
            [None, None, None, None, None, 50, None, None, None],
        ]
        engine = self.make_engine([entry(1, "Tara", grid)])
        for n in (3, 15, 44, 50):
            result = engine.draw_specific(n)
            self.assertEqual(result.winners, ())
        self.assertEqual(engine.winners(PrizeCategory.TOP_LINE), ())

        result = engine.draw_specific(82)
        self.assertEqual([e.category for e in result.winners], [PrizeCategory.TOP_LINE])
        self.assertEqual(engine.winners(PrizeCategory.TOP_LINE)[0].name, "Tara")
        self.assertTrue(engine.participants[0].rows_completed[0])

    def test_completed_row_is_not_announced_again(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        results = self.draw_all(engine, [4, 21, 42, 63, 81, 13])
        top_line = [
            e for r in results for e in r.winners if e.category is PrizeCategory.TOP_LINE
        ]
        self.assertEqual(len(top_line), 1)

    def test_early_five_after_fifth_mark(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        results = self.draw_all(engine, [13, 34, 45, 72])
        self.assertEqual([r.winners for r in results], [()] * 4)
        result = engine.draw_specific(55)
        self.assertEqual(len(result.winners), 1)
        event = result.winners[0]
        self.assertEqual(event.category, PrizeCategory.EARLY_FIVE)
        self.assertEqual(event.display_name, "Early Five")
        self.assertEqual(event.rank_label, "1st")

    def test_corners_use_first_and_last_numbers(self) -> None:
        engine = self.make_engine([entry(2, "Bilal", GRID_B)])
        results = self.draw_all(engine, [11, 83, 18])
        self.assertEqual([r.winners for r in results], [()] * 3)
        result = engine.draw_specific(79)
        self.assertEqual([e.category for e in result.winners], [PrizeCategory.CORNERS])
        self.assertEqual(result.winners[0].display_name, "Corners (1st)")
        self.assertTrue(engine.participants[0].corners_completed)

    def test_full_house_after_all_numbers(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        results = self.draw_all(engine, numbers_of(GRID_A))
        last = results[-1]
        self.assertIn(PrizeCategory.FULL_HOUSE, [e.category for e in last.winners])
        self.assertEqual(
            [c for c in PrizeCategory],
            engine.categories_won(engine.participants[0]),
        )
        # One full house out of three: the game goes on.
        self.assertEqual(last.snapshot.state, GameState.IN_PROGRESS)
        self.assertFalse(last.halt)


class CapacityTests(GameEngineTestCase):
    def test_capacities_and_completion(self) -> None:
        roster = [entry(i, f"Player {i}", GRID_A) for i in range(1, 5)]
        engine = self.make_engine(roster)
        results = self.draw_all(engine, numbers_of(GRID_A))

        for category, limit in WINNER_LIMITS.items():
            winners = engine.winners(category)
            self.assertLessEqual(len(winners), limit)
            self.assertEqual(len({p.id for p in winners}), len(winners))
        self.assertEqual(len(engine.winners(PrizeCategory.EARLY_FIVE)), 1)
        self.assertEqual(
            [p.id for p in engine.winners(PrizeCategory.FULL_HOUSE)], [1, 2, 3]
        )
        self.assertEqual(
            [p.id for p in engine.winners(PrizeCategory.TOP_LINE)], [1, 2]
        )

        last = results[-1]
        self.assertEqual(last.snapshot.state, GameState.COMPLETE)
        self.assertTrue(last.halt)
        full_house = [e for e in last.winners if e.category is PrizeCategory.FULL_HOUSE]
        self.assertEqual(
            [e.display_name for e in full_house],
            ["Full House (1st)", "Full House (2nd)", "Full House (3rd)"],
        )

        before = engine.snapshot()
        with self.assertRaises(GameComplete):
            engine.draw_next()
        with self.assertRaises(GameComplete):
            engine.draw_specific(1)
        self.assertEqual(engine.snapshot(), before)

    def test_snapshot_lists_winner_names(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A), entry(2, "Bilal", GRID_A)])
        self.draw_all(engine, [4, 21, 42, 63, 81])
        winners = engine.snapshot().winners
        self.assertEqual(winners[PrizeCategory.TOP_LINE], ("Asha", "Bilal"))
        self.assertEqual(winners[PrizeCategory.EARLY_FIVE], ("Asha",))
        self.assertEqual(winners[PrizeCategory.FULL_HOUSE], ())

    def test_custom_limits(self) -> None:
        limits = dict(WINNER_LIMITS)
        limits[PrizeCategory.FULL_HOUSE] = 1
        engine = self.make_engine([entry(1, "Asha", GRID_A)], winner_limits=limits)
        results = self.draw_all(engine, numbers_of(GRID_A))
        self.assertEqual(results[-1].snapshot.state, GameState.COMPLETE)

    def test_incomplete_limits_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.make_engine(winner_limits={PrizeCategory.FULL_HOUSE: 3})


class AnnouncementTests(GameEngineTestCase):
    PRE_DRAWS = [4, 21, 42, 63, 3, 9, 89]

    def test_auto_mode_emits_immediately(self) -> None:
        channel = MemoryChannel()
        engine = self.make_engine([entry(1, "Asha", GRID_A)], channel=channel)
        result = self.draw_all(engine, [4, 21, 42, 63, 81])[-1]
        self.assertEqual(result.announced, result.winners)
        self.assertEqual(
            [w["category"] for w in channel.winners], ["earlyFive", "topLine"]
        )
        self.assertEqual(engine.pending, ())

    def test_manual_mode_queues_in_evaluation_order(self) -> None:
        channel = MemoryChannel()
        engine = self.make_engine(
            [entry(1, "Asha", GRID_A), entry(2, "Chen", GRID_SHORT)],
            channel=channel,
            mode=AnnouncementMode.MANUAL,
        )
        self.draw_all(engine, self.PRE_DRAWS)
        result = engine.draw_specific(81)

        expected = [
            (PrizeCategory.EARLY_FIVE, "Asha", "1st"),
            (PrizeCategory.TOP_LINE, "Asha", "1st"),
            (PrizeCategory.TOP_LINE, "Chen", "2nd"),
            (PrizeCategory.CORNERS, "Chen", "1st"),
        ]
        got = [(e.category, e.participant_name, e.rank_label) for e in result.winners]
        self.assertEqual(got, expected)
        self.assertEqual(result.announced, ())
        self.assertEqual(channel.winners, [])
        self.assertEqual(engine.pending, result.winners)

        released = []
        while True:
            event = engine.release_next()
            if event is None:
                break
            released.append(event)
        self.assertEqual(tuple(released), result.winners)
        self.assertEqual(
            [(w["category"], w["participantName"]) for w in channel.winners],
            [(c.value, name) for c, name, _ in expected],
        )

    def test_categories_before_roster_order(self) -> None:
        engine = self.make_engine(
            [entry(2, "Chen", GRID_SHORT), entry(1, "Asha", GRID_A)],
            mode=AnnouncementMode.MANUAL,
        )
        self.draw_all(engine, self.PRE_DRAWS)
        result = engine.draw_specific(81)
        got = [(e.category, e.participant_name) for e in result.winners]
        self.assertEqual(
            got,
            [
                (PrizeCategory.EARLY_FIVE, "Asha"),
                (PrizeCategory.TOP_LINE, "Chen"),
                (PrizeCategory.TOP_LINE, "Asha"),
                (PrizeCategory.CORNERS, "Chen"),
            ],
        )

    def test_switch_to_auto_flushes_queue(self) -> None:
        channel = MemoryChannel()
        engine = self.make_engine(
            [entry(1, "Asha", GRID_A)], channel=channel, mode="manual"
        )
        self.draw_all(engine, [4, 21, 42, 63, 81])
        self.assertEqual(len(engine.pending), 2)

        flushed = engine.set_announcement_mode(AnnouncementMode.AUTO)
        self.assertEqual(
            [e.category for e in flushed],
            [PrizeCategory.EARLY_FIVE, PrizeCategory.TOP_LINE],
        )
        self.assertEqual(engine.pending, ())
        self.assertEqual(len(channel.winners), 2)
        self.assertIsNone(engine.release_next())

    def test_switch_to_manual_keeps_nothing_pending(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        self.assertEqual(engine.set_announcement_mode("manual"), [])
        self.assertIs(engine.mode, AnnouncementMode.MANUAL)

    def test_invalid_mode_rejected(self) -> None:
        engine = self.make_engine()
        with self.assertRaises(ValueError):
            engine.set_announcement_mode("loud")


class FlakyChannel(MemoryChannel):
    """Memory channel whose winner delivery can be switched off."""

    def __init__(self) -> None:
        super().__init__()
        self.winners_down = False

    def publish_winner(self, event) -> None:
        if self.winners_down:
            raise ChannelError("display unreachable")
        super().publish_winner(event)


class DeliveryFailureTests(GameEngineTestCase):
    def test_failed_winner_delivery_keeps_the_whole_draw(self) -> None:
        channel = FlakyChannel()
        engine = self.make_engine(
            [entry(1, "Asha", GRID_A), entry(2, "Bilal", GRID_B)], channel=channel
        )
        self.draw_all(engine, [4, 21, 42, 63])
        channel.winners_down = True

        with self.assertRaises(ChannelError) as ctx:
            engine.draw_specific(81)

        result = ctx.exception.result
        self.assertIsNotNone(result)
        self.assertEqual(result.number, 81)
        self.assertEqual(
            [e.category for e in result.winners],
            [PrizeCategory.EARLY_FIVE, PrizeCategory.TOP_LINE],
        )
        self.assertEqual(engine.draw_history, (4, 21, 42, 63, 81))
        self.assertEqual([p.name for p in engine.winners(PrizeCategory.EARLY_FIVE)], ["Asha"])
        self.assertEqual([p.name for p in engine.winners(PrizeCategory.TOP_LINE)], ["Asha"])
        # The snapshot goes out before any winner.
        self.assertEqual(channel.last_state["drawHistory"], [4, 21, 42, 63, 81])
        self.assertEqual(channel.last_state["winners"]["topLine"], ["Asha"])

        channel.winners_down = False
        self.draw_all(engine, [11, 22, 51])
        self.assertEqual([p.name for p in engine.winners(PrizeCategory.TOP_LINE)], ["Asha"])

    def test_failed_release_keeps_event_queued(self) -> None:
        channel = FlakyChannel()
        engine = self.make_engine(
            [entry(1, "Asha", GRID_A)], channel=channel, mode=AnnouncementMode.MANUAL
        )
        self.draw_all(engine, [4, 21, 42, 63, 81])
        channel.winners_down = True

        with self.assertRaises(ChannelError):
            engine.release_next()
        with self.assertRaises(ChannelError):
            engine.set_announcement_mode(AnnouncementMode.AUTO)
        self.assertEqual(len(engine.pending), 2)
        self.assertIs(engine.mode, AnnouncementMode.MANUAL)

        channel.winners_down = False
        released = engine.release_next()
        self.assertEqual(released.category, PrizeCategory.EARLY_FIVE)
        self.assertEqual([w["category"] for w in channel.winners], ["earlyFive"])
        self.assertEqual(len(engine.pending), 1)


class ResetTests(GameEngineTestCase):
    def test_reset_clears_game_but_keeps_tickets(self) -> None:
        channel = MemoryChannel()
        engine = self.make_engine(
            [entry(1, "Asha", GRID_A), entry(2, "Bilal", GRID_B)],
            channel=channel,
            mode=AnnouncementMode.MANUAL,
        )
        tickets_before = [p.ticket for p in engine.participants]
        self.draw_all(engine, [4, 21, 42, 63, 81, 11, 83, 18, 79])
        self.assertTrue(engine.pending)

        snapshot = engine.reset()
        self.assertEqual(snapshot.state, GameState.NOT_STARTED)
        self.assertEqual(snapshot.draw_history, ())
        self.assertEqual(snapshot.remaining, 90)
        self.assertTrue(all(names == () for names in snapshot.winners.values()))
        self.assertEqual(engine.pending, ())
        self.assertEqual(channel.last_state["drawHistory"], [])
        for participant, ticket in zip(engine.participants, tickets_before):
            self.assertEqual(participant.ticket, ticket)
            self.assertEqual(participant.marked_numbers, [])
            self.assertEqual(participant.rows_completed, [False, False, False])
            self.assertFalse(participant.corners_completed)

        # Same numbers win again after the reset.
        result = self.draw_all(engine, [4, 21, 42, 63, 81])[-1]
        self.assertEqual(
            [e.category for e in result.winners],
            [PrizeCategory.EARLY_FIVE, PrizeCategory.TOP_LINE],
        )

    def test_reset_after_exhaustion_allows_drawing(self) -> None:
        engine = self.make_engine()
        for _ in range(90):
            engine.draw_next()
        engine.reset()
        self.assertEqual(engine.state, GameState.NOT_STARTED)
        engine.draw_next()
        self.assertEqual(len(engine.draw_history), 1)


class RosterTests(GameEngineTestCase):
    def test_load_roster_accepts_payloads_and_objects(self) -> None:
        participant = Participant(id="b", name="Bilal", ticket=Ticket.from_grid(GRID_B))
        engine = self.make_engine([entry("a", "Asha", GRID_A), participant])
        self.assertEqual([p.id for p in engine.participants], ["a", "b"])
        self.assertEqual(engine.get_participant("b").ticket, participant.ticket)
        self.assertIsNone(engine.get_participant("zzz"))

    def test_engines_sharing_participant_objects_stay_independent(self) -> None:
        participant = Participant(id=1, name="Asha", ticket=Ticket.from_grid(GRID_A))
        first = self.make_engine([participant])
        second = self.make_engine([participant])
        self.draw_all(first, [4, 21, 42, 63, 81])

        self.assertEqual(participant.marked_numbers, [])
        self.assertEqual(second.participants[0].marked_numbers, [])
        self.assertEqual(second.participants[0].rows_completed, [False, False, False])
        self.assertEqual(first.participants[0].marked_numbers, [4, 21, 42, 63, 81])

    def test_returned_participants_cannot_change_marks(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        engine.draw_specific(4)
        outside = engine.get_participant(1)
        outside.marked_numbers.extend([21, 42, 63, 81])
        outside.rows_completed[0] = True

        self.assertEqual(engine.participants[0].marked_numbers, [4])
        self.assertFalse(engine.participants[0].rows_completed[0])
        self.assertEqual(engine.winners(PrizeCategory.TOP_LINE), ())

    def test_load_roster_resets_the_game(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        engine.draw_specific(4)
        snapshot = engine.load_roster([entry(2, "Bilal", GRID_B)])
        self.assertEqual(snapshot.draw_history, ())
        self.assertEqual([p.name for p in engine.participants], ["Bilal"])

    def test_duplicate_ids_rejected_without_changing_roster(self) -> None:
        engine = self.make_engine([entry(1, "Asha", GRID_A)])
        with self.assertRaises(ValueError):
            engine.load_roster([entry(2, "Bilal", GRID_B), entry(2, "Chen", GRID_A)])
        self.assertEqual([p.name for p in engine.participants], ["Asha"])

    def test_roster_published_to_channel(self) -> None:
        channel = MemoryChannel()
        self.make_engine([entry(1, "Asha", GRID_A)], channel=channel)
        self.assertEqual(len(channel.rosters), 1)
        payload = channel.rosters[0]["participants"][0]
        self.assertEqual(payload["ticket"], GRID_A)
        self.assertEqual(payload["markedNumbers"], [])
        self.assertEqual(len(channel.states), 1)


class OrdinalTests(unittest.TestCase):
    def test_ordinals(self) -> None:
        labels = [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101, 111)]
        self.assertEqual(
            labels,
            ["1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st", "111th"],
        )

    def test_rank_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            ordinal(0)


if __name__ == "__main__":
    unittest.main()

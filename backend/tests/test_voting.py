import pytest

from wordstop.game.voting import VoteCycle


class Voter:
    def __init__(self, name, answers=None):
        self.name = name
        self.answers = dict(answers or {})
        self.votes = set()
        self.sent = []

    def send(self, message):
        self.sent.append(message)
        if message['type'] == 'category-vote-started':
            self.votes = set(message['content']['answers'])


def test_votes_each_category_on_cadence_then_completes(scheduler):
    alice = Voter('alice', {'Animal': 'bear', 'Food': 'bread'})
    bob = Voter('bob', {'Animal': 'bison'})
    cycle = VoteCycle([alice, bob], ['Animal', 'Food'], scheduler, 7.5)

    cycle.start()
    scheduler.advance(7)
    assert alice.sent == []

    scheduler.advance(0.5)
    assert alice.sent[-1] == {
        'type': 'category-vote-started',
        'content': {'category': 'Animal', 'answers': ['bear', 'bison'], 'duration': 7500},
    }
    bob.votes.discard('bear')

    scheduler.advance(7.5)
    assert bob.sent[-1]['content']['category'] == 'Food'
    assert bob.sent[-1]['content']['answers'] == ['bread']
    assert not cycle.completion.done()

    scheduler.advance(7.5)
    assert cycle.completion.done()
    assert cycle.completion.result() == {alice: 1 + 2, bob: 2}
    assert not cycle.running
    assert scheduler.pending == 0


def test_stop_cancels_without_result(scheduler):
    alice = Voter('alice', {'Animal': 'bear'})
    cycle = VoteCycle([alice], ['Animal'], scheduler, 7.5)
    cycle.start()
    scheduler.advance(7.5)

    cycle.stop()
    cycle.stop()
    scheduler.advance(60)

    assert cycle.completion.cancelled()
    assert len(alice.sent) == 1
    assert scheduler.pending == 0


def test_player_leaving_mid_vote_is_left_out(scheduler):
    alice = Voter('alice', {'Animal': 'bear'})
    bob = Voter('bob', {'Animal': 'bear'})
    players = [alice, bob]
    cycle = VoteCycle(players, ['Animal'], scheduler, 1)
    cycle.start()
    scheduler.advance(1)

    players.remove(bob)
    scheduler.advance(1)

    assert cycle.completion.result() == {alice: 1}


def test_cannot_start_twice(scheduler):
    cycle = VoteCycle([], ['Animal'], scheduler, 1)
    cycle.start()
    with pytest.raises(RuntimeError):
        cycle.start()


def test_ticks_go_through_run(scheduler):
    calls = []

    def run(fn, *args):
        calls.append(fn)
        return fn(*args)

    cycle = VoteCycle([Voter('alice')], ['Animal'], scheduler, 1, run=run)
    cycle.start()
    scheduler.advance(2)

    assert len(calls) == 2
    assert cycle.completion.result()

from wordstop.game.scoring import category_answers, score_category


class Entry:
    def __init__(self, name, answers=None, votes=()):
        self.name = name
        self.answers = dict(answers or {})
        self.votes = set(votes)


def test_score_is_accept_votes_for_own_answer():
    p1 = Entry('P1', {'Animal': 'cat'}, votes={'cat'})
    p2 = Entry('P2', {'Animal': 'dog'}, votes={'cat'})
    p3 = Entry('P3', {'Animal': 'cat'})

    scores = score_category([p1, p2, p3], 'Animal')

    assert scores == {p1: 2, p2: 0, p3: 2}


def test_missing_or_empty_answer_scores_zero():
    p1 = Entry('P1', {}, votes={''})
    p2 = Entry('P2', {'Animal': ''}, votes={''})
    p3 = Entry('P3', {'Food': 'bread'}, votes={'bread'})

    assert score_category([p1, p2, p3], 'Animal') == {p1: 0, p2: 0, p3: 0}


def test_votes_for_unknown_answers_are_ignored():
    p1 = Entry('P1', {'Animal': 'bear'}, votes={'bear', 'zebra'})
    p2 = Entry('P2', {'Animal': 'bison'}, votes={'zebra'})

    assert score_category([p1, p2], 'Animal') == {p1: 1, p2: 0}


def test_category_answers_are_distinct_non_empty_in_order():
    players = [
        Entry('P1', {'Animal': 'cat'}),
        Entry('P2', {'Animal': ''}),
        Entry('P3', {'Animal': 'dog'}),
        Entry('P4', {'Animal': 'cat'}),
        Entry('P5', {}),
    ]

    assert category_answers(players, 'Animal') == ['cat', 'dog']

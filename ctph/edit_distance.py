"""Weighted edit distance between two digests."""


class EditDistanceScorer(object):
    """
    Two-row dynamic-programming edit distance.

    Insert and delete share one cost so that ``distance(a, b) ==
    distance(b, a)``. The defaults are unit costs; ``replace_cost=2``
    reproduces the numbers of ssdeep 2.10 and later.
    """

    def __init__(self, insert_cost: int = 1, delete_cost: int = 1, replace_cost: int = 1):
        if insert_cost != delete_cost:
            raise ValueError(
                f"Insert and delete costs must match to keep the distance symmetric "
                f"(got {insert_cost} and {delete_cost})."
            )
        if min(insert_cost, delete_cost, replace_cost) < 0:
            raise ValueError("Edit costs must be non-negative.")
        self.insert_cost = insert_cost
        self.delete_cost = delete_cost
        self.replace_cost = replace_cost

    def __repr__(self):
        return (f"EditDistanceScorer(insert_cost={self.insert_cost}, "
                f"delete_cost={self.delete_cost}, replace_cost={self.replace_cost})")

    def distance(self, s: str, t: str) -> int:
        if s == t: return 0
        ins = self.insert_cost
        rem = self.delete_cost
        rep = self.replace_cost
        len_s = len(s)
        len_t = len(t)
        if len_s == 0: return len_t * ins
        if len_t == 0: return len_s * rem
        v0 = [j * ins for j in range(len_t + 1)]
        v1 = [0] * (len_t + 1)
        for i in range(len_s):
            v1[0] = (i + 1) * rem
            s_i = s[i]
            for j in range(len_t):
                cost = 0 if s_i == t[j] else rep
                v1[j + 1] = min(v1[j] + ins, v0[j + 1] + rem, v0[j] + cost)
            v0, v1 = v1, v0
        return v0[len_t]


default_scorer = EditDistanceScorer()

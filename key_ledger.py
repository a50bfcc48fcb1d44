# key_ledger.py

class KeyLedger:
    """Records which keys each node currently owns.

    Keys are kept per node in assignment order. The ledger itself knows
    nothing about the ring; the ring decides where keys go and tells the
    ledger.
    """

    def __init__(self):
        self.store = {}  # node -> [key, ...]

    def register(self, node):
        # re-registering keeps whatever the node already holds
        self.store.setdefault(node, [])

    def add(self, node, key):
        keys = self.store.setdefault(node, [])
        if key in keys:
            return False
        keys.append(key)
        return True

    def discard(self, node, key):
        keys = self.store.get(node)
        if not keys or key not in keys:
            return False
        keys.remove(key)
        return True

    def pop(self, node):
        return self.store.pop(node, [])

    def get(self, node):
        return list(self.store.get(node, []))

    def locate(self, key):
        for node, keys in self.store.items():
            if key in keys:
                return node
        return None

    def nodes(self):
        return list(self.store.keys())

    def snapshot(self):
        return {node: list(keys) for node, keys in self.store.items()}

    def total(self):
        return sum(len(keys) for keys in self.store.values())

    def __contains__(self, node):
        return node in self.store

"""Core runtime: the channel index and its subscription layer."""
from chanidx.core.trie import DELIMITER, WILDCARD, ReverseTrie, TrieNode, create_key

__all__ = ["DELIMITER", "WILDCARD", "ReverseTrie", "TrieNode", "create_key"]

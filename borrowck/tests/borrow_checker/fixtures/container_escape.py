# Borrows that escape into a container outlive their owner. Nothing here is
# visible to the static pass; the runtime refuses to drop `test`.
from borrowck.runtime import Unique


def collect():
	borrowed = []
	with Unique(100) as test:
		for _ in range(10):
			borrowed.append(test.borrow())
	return borrowed

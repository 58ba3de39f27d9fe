# Shadowed owners in nested blocks, a function-local conflict and a
# module-level owner borrowed from several scopes.
from borrowck.runtime import Unique

global_data = Unique(0)


def foo():
	data = Unique(42)
	b = data.borrow()
	bm = data.borrow_mut()
	b2 = global_data.borrow()


def main():
	data = Unique(42)
	bm = data.borrow_mut()
	if True:
		data = Unique(100)
		if True:
			b2 = data.borrow()
		bm2 = data.borrow_mut()
		bm3 = global_data.borrow_mut()
	b = global_data.borrow()

	borrowed = []
	with Unique(100) as test:
		for _ in range(10):
			borrowed.append(test.borrow())
	return 0

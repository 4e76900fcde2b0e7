"""
A fixed-size table of on/off bits, used to record which state ids are
reserved.
"""

from array import array

#: Table of the number of '1' bits in each byte (0-255)
BYTE_COUNTS = array("B", [bin(byte).count("1") for byte in range(256)])


class BitVector:
    """
    Implements a memory-efficient array of bits indexed by state id.

    >>> bv = BitVector(10)
    >>> bv
    <BitVector 0000000000>
    >>> bv[5] = True
    >>> bv
    <BitVector 0000010000>

    You can initialize the BitVector using an iterable of integers representing bit
    positions to turn on.

    >>> bv2 = BitVector(10, [2, 4, 7])
    >>> list(bv2)
    [2, 4, 7]

    Note that ``BitVector.__len__()`` returns the number of "on" bits, not
    the size of the bit array, so a BitVector can stand in for a set of
    state ids. To get the size, use BitVector.size.
    """

    def __init__(self, size, source=None, bits=None):
        """
        Initializes a BitVector object.

        Args:
            size (int): The number of bits in the vector.
            source (iterable, optional): Positions to turn on. Defaults to None.
            bits (array, optional): Raw bytes to use as the backing store. Defaults to None.
        """
        self.size = size

        if bits is not None:
            self.bits = bits
        else:
            self.bits = array("B", ([0x00] * ((size >> 3) + 1)))

        self.bcount = None

        if source:
            self.set_from(source)

    def __eq__(self, other):
        if isinstance(other, BitVector):
            return self.size == other.size and self.bits == other.bits
        return False

    def __repr__(self):
        return f"<BitVector {self.__str__()}>"

    def __str__(self):
        get = self.__getitem__
        return "".join("1" if get(i) else "0" for i in range(0, self.size))

    def __len__(self):
        """
        Returns the number of "on" bits in the BitVector.
        """
        return self.count()

    def __bool__(self):
        return any(self.bits)

    def __contains__(self, index):
        """
        Checks whether a position is on. Positions outside the vector, and
        anything that is not an int, are reported as off rather than raising.
        """
        if not isinstance(index, int) or isinstance(index, bool):
            return False
        if index < 0 or index >= self.size:
            return False
        return self[index]

    def __iter__(self):
        """
        Yields the positions of the "on" bits in ascending order.
        """
        bits = self.bits
        for byteno, byte in enumerate(bits):
            if not byte:
                continue
            base = byteno << 3
            for bit in range(8):
                if byte & (1 << bit):
                    yield base + bit

    def __getitem__(self, index):
        return self.bits[index >> 3] & (1 << (index & 7)) != 0

    def __setitem__(self, index, value):
        if value:
            self.set(index)
        else:
            self.clear(index)

    def __or__(self, other):
        """
        Returns a new BitVector with the bits of both operands turned on.

        Args:
            other (BitVector): A BitVector of the same size.

        Raises:
            ValueError: If the vectors have different sizes.
        """
        if self.size != other.size:
            raise ValueError("Can't combine bitvectors of different sizes")
        return BitVector(
            self.size, bits=array("B", (a | b for a, b in zip(self.bits, other.bits)))
        )

    def count(self):
        """
        Returns the number of "on" bits in the BitVector.
        """
        if self.bcount is None:
            self.bcount = sum(BYTE_COUNTS[b & 0xFF] for b in self.bits)
        return self.bcount

    def set(self, index):
        """
        Turns the bit at the given position on.

        Args:
            index (int): The index of the bit to turn on.

        Raises:
            IndexError: If the position lies outside the vector.
        """
        if index < 0 or index >= self.size:
            raise IndexError(f"Position {index!r} outside a vector of size {self.size}")
        self.bits[index >> 3] |= 1 << (index & 7)
        self.bcount = None

    def clear(self, index):
        """
        Turns the bit at the given position off.

        Args:
            index (int): The index of the bit to turn off.

        Raises:
            IndexError: If the position lies outside the vector.
        """
        if index < 0 or index >= self.size:
            raise IndexError(f"Position {index!r} outside a vector of size {self.size}")
        self.bits[index >> 3] &= ~(1 << (index & 7))
        self.bcount = None

    def set_from(self, iterable):
        """
        Turns on the bits at the positions specified by an iterable of integers.
        """
        set_var = self.set
        for index in iterable:
            set_var(index)

    def clear_from(self, iterable):
        """
        Turns off the bits at the positions specified by an iterable of integers.
        """
        clear_var = self.clear
        for index in iterable:
            clear_var(index)

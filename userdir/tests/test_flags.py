"""Tests for :mod:`userdir.flags`."""

from unittest import TestCase

from hypothesis import given
from hypothesis import strategies as st

from ..flags import BitField, UserFlags, Rights, DEFAULT_RIGHTS, \
    CUSTOM_USER_FLAG_OFFSET


class TestBitField(TestCase):
    """Tests for the operations shared by all bitsets."""

    def test_has_named_flag(self):
        """A flag that was set is reported as set."""
        flags = UserFlags(['STAFF', 'SYSTEM'])
        self.assertTrue(flags.has('SYSTEM'))
        self.assertTrue(flags.has(['STAFF', 'SYSTEM']))
        self.assertFalse(flags.has('VERIFIED_BOT'))
        self.assertIn('STAFF', flags)

    def test_resolve(self):
        """Names, decimal strings, bitsets and collections all resolve."""
        self.assertEqual(UserFlags.resolve('SYSTEM'), 1 << 12)
        self.assertEqual(UserFlags.resolve('4096'), 1 << 12)
        self.assertEqual(UserFlags.resolve(UserFlags('STAFF')), 1)
        self.assertEqual(UserFlags.resolve(['STAFF', 1 << 12]), (1 << 12) | 1)
        with self.assertRaises(ValueError):
            UserFlags.resolve('NO_SUCH_FLAG')
        with self.assertRaises(ValueError):
            UserFlags.resolve(-1)

    def test_has_all_versus_any(self):
        """``has`` needs every flag, ``any`` needs only one."""
        flags = UserFlags('STAFF')
        self.assertFalse(flags.has(['STAFF', 'SYSTEM']))
        self.assertTrue(flags.any(['STAFF', 'SYSTEM']))

    def test_add_and_remove_return_copies(self):
        """The original bitset is never modified."""
        flags = UserFlags()
        added = flags.add('SYSTEM', 'STAFF')
        self.assertEqual(int(flags), 0)
        self.assertEqual(added, (1 << 12) | 1)

        removed = added.remove('STAFF')
        self.assertEqual(removed, 1 << 12)
        self.assertEqual(added, (1 << 12) | 1)
        self.assertIsInstance(removed, UserFlags)

    def test_remove_unset_flag(self):
        """Removing a flag that is not set changes nothing."""
        self.assertEqual(UserFlags('STAFF').remove('SYSTEM'), 1)

    def test_names_in_bit_order(self):
        """Set flags are listed from the lowest bit up."""
        flags = UserFlags(['SYSTEM', 'STAFF', 'TEAM_USER'])
        self.assertEqual(flags.names(), ['STAFF', 'TEAM_USER', 'SYSTEM'])

    def test_missing(self):
        """Names of requested flags that are not set."""
        flags = UserFlags('STAFF')
        self.assertEqual(flags.missing('STAFF', 'SYSTEM'), ['SYSTEM'])
        self.assertEqual(flags.missing('STAFF'), [])

    def test_unknown_name(self):
        """An unknown flag name is an error."""
        with self.assertRaises(ValueError):
            UserFlags('NOT_A_FLAG')

    def test_negative(self):
        """Bitsets cannot be negative."""
        with self.assertRaises(ValueError):
            UserFlags(-1)

    def test_bool_is_not_a_flag(self):
        """``True`` is an int in Python, but not a flag."""
        with self.assertRaises(ValueError):
            UserFlags(True)

    def test_types_do_not_compare_equal(self):
        """A set of rights is not equal to the same bits as user flags."""
        self.assertNotEqual(UserFlags(1), Rights(1))
        self.assertEqual(UserFlags(1), UserFlags(1))

    def test_from_string_rejects_garbage(self):
        """Only base-10 strings can be decoded."""
        for value in ('', '-1', '0x10', 'twelve', '1.5'):
            with self.assertRaises(ValueError):
                UserFlags.from_string(value)

    def test_from_string_wide_value(self):
        """Values wider than 64 bits survive decoding."""
        value = str((1 << 100) | 1)
        self.assertEqual(str(UserFlags.from_string(value)), value)

    @given(st.integers(min_value=0, max_value=(1 << 128)))
    def test_string_round_trip(self, value):
        """Decoding the string form gives back the same bits."""
        flags = UserFlags(value)
        self.assertEqual(UserFlags.from_string(str(flags)), flags)

    def test_undefined_bits_survive(self):
        """Bits with no name are kept through a read/modify/write cycle."""
        stored = str(CUSTOM_USER_FLAG_OFFSET | (1 << 40) | 1)
        flags = UserFlags.from_string(stored)
        self.assertEqual(flags.unknown, CUSTOM_USER_FLAG_OFFSET | (1 << 40))

        updated = flags.add('SYSTEM').remove('STAFF')
        self.assertEqual(updated.unknown, CUSTOM_USER_FLAG_OFFSET | (1 << 40))
        self.assertEqual(updated.names(), ['SYSTEM'])


class TestRights(TestCase):
    """Tests for :class:`.Rights`."""

    def test_default_rights(self):
        """New accounts get the documented default rights."""
        self.assertEqual(int(DEFAULT_RIGHTS), 874722686401536)
        self.assertEqual(str(DEFAULT_RIGHTS), '874722686401536')

    def test_default_rights_do_not_include_moderation(self):
        """Nothing administrative is granted by default."""
        self.assertFalse(DEFAULT_RIGHTS.any(['OPERATOR', 'MANAGE_USERS',
                                             'MANAGE_COMMUNITIES']))
        self.assertTrue(DEFAULT_RIGHTS.has('SEND_MESSAGES'))

    def test_operator_has_every_right(self):
        """An operator is considered to have any right."""
        operator = Rights('OPERATOR')
        self.assertTrue(operator.has('MANAGE_USERS'))
        self.assertTrue(operator.has(['EDIT_FLAGS', 'USE_VOICE']))

    def test_retired_bit_is_unknown(self):
        """Bit 38 has no name, but is kept if present."""
        rights = Rights(1 << 38)
        self.assertEqual(rights.names(), [])
        self.assertEqual(rights.unknown, 1 << 38)


class TestGenericBitField(TestCase):
    """A bitset with no named flags still holds bits."""

    def test_plain_bits(self):
        field = BitField(0b101)
        self.assertTrue(field.has(0b100))
        self.assertFalse(field.has(0b010))
        self.assertTrue(bool(field))
        self.assertFalse(bool(BitField()))

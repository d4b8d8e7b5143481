"""
Capability bitsets attached to every account.

Flags are backed by a plain Python ``int``, so a bitset may be as wide as it
needs to be. Bits above :data:`CUSTOM_USER_FLAG_OFFSET` are reserved for
deployment-specific flags. Values cross the serialization boundary (database,
JSON) as base-10 strings, because some clients cannot represent integers
wider than 53 bits.

Bits that have no name in the running build are carried along untouched: a
value written by a newer build survives a read/modify/write cycle here.
"""

from typing import Any, Dict, Iterable, List, Union

Flag = Union[int, str, 'BitField', Iterable[Any]]

CUSTOM_USER_FLAG_OFFSET = 1 << 32
"""First bit position available for deployment-specific flags."""


class BitField:
    """Immutable set of named bit flags."""

    FLAGS: Dict[str, int] = {}
    """Flag names mapped to their bit values. Positions are never reused."""

    __slots__ = ('bitfield',)

    def __init__(self, bits: Flag = 0) -> None:
        self.bitfield: int = self.resolve(bits)

    @classmethod
    def resolve(cls, bits: Flag) -> int:
        """
        Get the integer value of a flag, flag name, bitset, or collection.

        Parameters
        ----------
        bits : int, str, :class:`.BitField`, or iterable of those

        Returns
        -------
        int

        Raises
        ------
        ValueError
            If a name is unknown, or an integer is negative.

        """
        if isinstance(bits, BitField):
            return bits.bitfield
        if isinstance(bits, bool):
            raise ValueError(f'Not a valid flag: {bits!r}')
        if isinstance(bits, int):
            if bits < 0:
                raise ValueError(f'Flags cannot be negative: {bits}')
            return bits
        if isinstance(bits, str):
            if bits in cls.FLAGS:
                return cls.FLAGS[bits]
            if bits.isdigit():
                return int(bits)
            raise ValueError(f'Unknown flag: {bits}')
        value = 0
        for bit in bits:
            value |= cls.resolve(bit)
        return value

    def has(self, bit: Flag) -> bool:
        """Whether every flag in ``bit`` is set."""
        value = self.resolve(bit)
        return (self.bitfield & value) == value

    def any(self, bit: Flag) -> bool:
        """Whether at least one flag in ``bit`` is set."""
        return (self.bitfield & self.resolve(bit)) != 0

    def missing(self, *bits: Flag) -> List[str]:
        """Names of the requested flags that are not set."""
        wanted = type(self)(bits)
        return [name for name in wanted.names() if not self.has(name)]

    def add(self, *bits: Flag) -> 'BitField':
        """Get a copy of this bitset with ``bits`` set."""
        return type(self)(self.bitfield | self.resolve(bits))

    def remove(self, *bits: Flag) -> 'BitField':
        """Get a copy of this bitset with ``bits`` cleared."""
        return type(self)(self.bitfield & ~self.resolve(bits))

    def names(self) -> List[str]:
        """Names of the set flags, in bit order."""
        return [name for name, value in
                sorted(self.FLAGS.items(), key=lambda item: item[1])
                if self.has(value)]

    @property
    def unknown(self) -> int:
        """Set bits that have no name in this build."""
        known = 0
        for value in self.FLAGS.values():
            known |= value
        return self.bitfield & ~known

    @classmethod
    def from_string(cls, value: str) -> 'BitField':
        """Decode a base-10 representation produced by ``str()``."""
        value = value.strip()
        if not value.isdigit():
            raise ValueError(f'Not a decimal bitset: {value!r}')
        return cls(int(value))

    def __str__(self) -> str:
        return str(self.bitfield)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.bitfield})'

    def __int__(self) -> int:
        return self.bitfield

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BitField):
            return type(self) is type(other) \
                and self.bitfield == other.bitfield
        if isinstance(other, int) and not isinstance(other, bool):
            return self.bitfield == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.bitfield))

    def __contains__(self, bit: Flag) -> bool:
        return self.has(bit)

    def __bool__(self) -> bool:
        return self.bitfield != 0


class UserFlags(BitField):
    """Badges and account-type markers, shown publicly."""

    FLAGS = {
        'STAFF': 1 << 0,
        'PARTNERED_COMMUNITY_OWNER': 1 << 1,
        'COMMUNITY_EVENTS': 1 << 2,
        'BUGHUNTER_LEVEL_1': 1 << 3,
        'MFA_SMS': 1 << 4,
        'PREMIUM_PROMO_DISMISSED': 1 << 5,
        'HOUSE_BRAVERY': 1 << 6,
        'HOUSE_BRILLIANCE': 1 << 7,
        'HOUSE_BALANCE': 1 << 8,
        'EARLY_SUPPORTER': 1 << 9,
        'TEAM_USER': 1 << 10,
        'TRUST_AND_SAFETY': 1 << 11,
        'SYSTEM': 1 << 12,
        'HAS_UNREAD_URGENT_MESSAGES': 1 << 13,
        'BUGHUNTER_LEVEL_2': 1 << 14,
        'UNDERAGE_DELETED': 1 << 15,
        'VERIFIED_BOT': 1 << 16,
        'EARLY_VERIFIED_BOT_DEVELOPER': 1 << 17,
        'CERTIFIED_MODERATOR': 1 << 18,
        'BOT_HTTP_INTERACTIONS': 1 << 19,
    }


class Rights(BitField):
    """Platform-level permissions granted to an account."""

    FLAGS = {
        'OPERATOR': 1 << 0,     # implies every other right
        'MANAGE_APPLICATIONS': 1 << 1,
        'MANAGE_COMMUNITIES': 1 << 2,
        'MANAGE_MESSAGES': 1 << 3,
        'MANAGE_RATE_LIMITS': 1 << 4,
        'MANAGE_ROUTING': 1 << 5,
        'MANAGE_TICKETS': 1 << 6,
        'MANAGE_USERS': 1 << 7,
        'ADD_MEMBERS': 1 << 8,
        'BYPASS_RATE_LIMITS': 1 << 9,
        'CREATE_APPLICATIONS': 1 << 10,
        'CREATE_CHANNELS': 1 << 11,
        'CREATE_DMS': 1 << 12,
        'CREATE_DM_GROUPS': 1 << 13,
        'CREATE_COMMUNITIES': 1 << 14,
        'CREATE_INVITES': 1 << 15,
        'CREATE_ROLES': 1 << 16,
        'CREATE_TEMPLATES': 1 << 17,
        'CREATE_WEBHOOKS': 1 << 18,
        'JOIN_COMMUNITIES': 1 << 19,
        'PIN_MESSAGES': 1 << 20,
        'SELF_ADD_REACTIONS': 1 << 21,
        'SELF_DELETE_MESSAGES': 1 << 22,
        'SELF_EDIT_MESSAGES': 1 << 23,
        'SELF_EDIT_NAME': 1 << 24,
        'SEND_MESSAGES': 1 << 25,
        'USE_ACTIVITIES': 1 << 26,
        'USE_VIDEO': 1 << 27,
        'USE_VOICE': 1 << 28,
        'INVITE_USERS': 1 << 29,
        'SELF_DELETE_DISABLE': 1 << 30,
        'DEBTABLE': 1 << 31,
        'CREDITABLE': 1 << 32,
        'KICK_BAN_MEMBERS': 1 << 33,
        'SELF_LEAVE_GROUPS': 1 << 34,
        'PRESENCE': 1 << 35,
        'SELF_ADD_DISCOVERABLE': 1 << 36,
        'MANAGE_COMMUNITY_DIRECTORY': 1 << 37,
        # 38 is retired.
        'USE_ACHIEVEMENTS': 1 << 39,
        'INITIATE_INTERACTIONS': 1 << 40,
        'RESPOND_TO_INTERACTIONS': 1 << 41,
        'SEND_BACKDATED_EVENTS': 1 << 42,
        'USE_MASS_INVITES': 1 << 43,
        'ACCEPT_INVITES': 1 << 44,
        'SELF_EDIT_FLAGS': 1 << 45,
        'EDIT_FLAGS': 1 << 46,
        'MANAGE_GROUPS': 1 << 47,
        'VIEW_SERVER_STATS': 1 << 48,
        'RESEND_VERIFICATION_EMAIL': 1 << 49,
    }

    def has(self, bit: Flag) -> bool:
        """Whether every right in ``bit`` is granted (operators have all)."""
        if self.bitfield & self.FLAGS['OPERATOR']:
            return True
        return super(Rights, self).has(bit)


DEFAULT_RIGHTS = Rights([
    'CREATE_APPLICATIONS', 'CREATE_CHANNELS', 'CREATE_DMS',
    'CREATE_DM_GROUPS', 'CREATE_COMMUNITIES', 'CREATE_INVITES',
    'CREATE_ROLES', 'CREATE_TEMPLATES', 'CREATE_WEBHOOKS',
    'JOIN_COMMUNITIES', 'PIN_MESSAGES', 'SELF_ADD_REACTIONS',
    'SELF_DELETE_MESSAGES', 'SELF_EDIT_MESSAGES', 'SEND_MESSAGES',
    'USE_ACTIVITIES', 'USE_VIDEO', 'USE_VOICE', 'INVITE_USERS',
    'KICK_BAN_MEMBERS', 'SELF_LEAVE_GROUPS', 'PRESENCE', 'USE_ACHIEVEMENTS',
    'INITIATE_INTERACTIONS', 'RESPOND_TO_INTERACTIONS', 'USE_MASS_INVITES',
    'ACCEPT_INVITES', 'VIEW_SERVER_STATS', 'RESEND_VERIFICATION_EMAIL',
])
"""Rights granted to every newly registered account."""

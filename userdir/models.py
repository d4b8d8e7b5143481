"""Database models for accounts and their settings."""

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, \
    Index, Integer, String, Text, false, text
from sqlalchemy.orm import relationship
from flask_sqlalchemy import SQLAlchemy

db: SQLAlchemy = SQLAlchemy()


class DBAccountSettings(db.Model):  # type: ignore
    """
    Client preferences for an account.

    Exactly one row per account, written in the same transaction as the
    account itself.
    """

    __tablename__ = 'account_settings'

    settings_id = Column(BigInteger, primary_key=True, autoincrement=False)
    locale = Column(String(16), nullable=False, server_default=text("'en-US'"))
    theme = Column(String(16), nullable=False, server_default=text("'dark'"))
    status = Column(String(16), nullable=False,
                    server_default=text("'offline'"))
    afk_timeout = Column(Integer, nullable=False, server_default=text("300"))
    timezone_offset = Column(Integer, nullable=False,
                             server_default=text("0"))
    developer_mode = Column(Boolean, nullable=False, default=False)
    message_display_compact = Column(Boolean, nullable=False, default=False)
    explicit_content_filter = Column(Integer, nullable=False,
                                     server_default=text("0"))
    animate_emoji = Column(Boolean, nullable=False, default=True)
    gif_auto_play = Column(Boolean, nullable=False, default=True)
    render_embeds = Column(Boolean, nullable=False, default=True)
    inline_embed_media = Column(Boolean, nullable=False, default=True)


class DBAccount(db.Model):  # type: ignore
    """
    Account table.

    +--------------------+--------------+------+-----+---------+
    | Field              | Type         | Null | Key | Default |
    +--------------------+--------------+------+-----+---------+
    | account_id         | bigint       | NO   | PRI | NULL    |
    | username           | varchar(32)  | NO   | MUL |         |
    | discriminator      | char(4)      | NO   |     | 0000    |
    | email              | varchar(255) | YES  | MUL | NULL    |
    | password_hash      | varchar(72)  | YES  |     | NULL    |
    | flags              | varchar(64)  | NO   |     | 0       |
    | public_flags       | int          | NO   |     | 0       |
    | rights             | varchar(64)  | NO   |     | 0       |
    | extended_settings  | text         | NO   |     | {}      |
    | settings_id        | bigint       | NO   | UNI | NULL    |
    +--------------------+--------------+------+-----+---------+

    ``(username, discriminator)`` and ``email`` are unique among rows that
    are not soft-deleted. ``flags`` and ``rights`` hold decimal strings,
    since they may be wider than any native integer column.
    """

    __tablename__ = 'accounts'

    account_id = Column(BigInteger, primary_key=True, autoincrement=False)
    username = Column(String(32), nullable=False, index=True)
    discriminator = Column(String(4), nullable=False,
                           server_default=text("'0000'"))
    email = Column(String(255), nullable=True)
    password_hash = Column(String(72), nullable=True)
    created_at = Column(DateTime, nullable=False)
    valid_tokens_since = Column(DateTime, nullable=False)

    verified = Column(Boolean, nullable=False, default=False)
    disabled = Column(Boolean, nullable=False, default=False)
    deleted = Column(Boolean, nullable=False, default=False)
    bot = Column(Boolean, nullable=False, default=False)
    system = Column(Boolean, nullable=False, default=False)
    avatar = Column(String(255), nullable=True)
    bio = Column(String(190), nullable=False, server_default=text("''"))

    flags = Column(String(64), nullable=False, server_default=text("'0'"))
    public_flags = Column(Integer, nullable=False, server_default=text("0"))
    rights = Column(String(64), nullable=False, server_default=text("'0'"))
    extended_settings = Column(Text, nullable=False,
                               server_default=text("'{}'"))

    settings_id = Column(ForeignKey('account_settings.settings_id',
                                    ondelete='CASCADE'),
                         nullable=False, unique=True)

    settings = relationship('DBAccountSettings', single_parent=True,
                            cascade='all, delete-orphan')
    fingerprints = relationship('DBFingerprint', back_populates='account',
                                cascade='all, delete-orphan',
                                order_by='DBFingerprint.fingerprint_id')

    __table_args__ = (
        Index('ix_accounts_active_tag', username, discriminator, unique=True,
              sqlite_where=(deleted == false()),
              postgresql_where=(deleted == false())),
        Index('ix_accounts_active_email', email, unique=True,
              sqlite_where=(deleted == false()),
              postgresql_where=(deleted == false())),
    )


class DBFingerprint(db.Model):  # type: ignore
    """Device/registration fingerprints seen for an account. Append-only."""

    __tablename__ = 'account_fingerprints'

    fingerprint_id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(ForeignKey('accounts.account_id', ondelete='CASCADE'),
                        nullable=False, index=True)
    fingerprint = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    account = relationship('DBAccount', back_populates='fingerprints')


class DBMembership(db.Model):  # type: ignore
    """Membership of an account in a community."""

    __tablename__ = 'community_members'

    account_id = Column(ForeignKey('accounts.account_id', ondelete='CASCADE'),
                        primary_key=True)
    community_id = Column(String(32), primary_key=True)
    joined_at = Column(DateTime, nullable=False)

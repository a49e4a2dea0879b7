"""Cash register shift model"""

from sqlalchemy import Column, Index, Integer, Numeric, String, text

from foodpos.database import Base


class Shift(Base):
    """Cash register operating periods"""
    __tablename__ = "shifts"

    # Assigned by the terminal: max(id) + 1
    id = Column(Integer, primary_key=True, autoincrement=False)

    # "<date> HH:MM" in the terminal's local time
    start_time = Column(String(32), nullable=False)
    end_time = Column(String(32))

    operator_name = Column(String(255), nullable=False)
    initial_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    # Closing breakdown
    closing_amount = Column(Numeric(12, 2, asdecimal=False))
    closing_cash_amount = Column(Numeric(12, 2, asdecimal=False))
    closing_debit_amount = Column(Numeric(12, 2, asdecimal=False))
    closing_credit_amount = Column(Numeric(12, 2, asdecimal=False))
    closing_pix_amount = Column(Numeric(12, 2, asdecimal=False))

    status = Column(String(10), nullable=False, default="active")  # active, closed

    # Counters
    cash_transactions = Column(Integer, nullable=False, default=0)
    card_transactions = Column(Integer, nullable=False, default=0)
    pix_transactions = Column(Integer, nullable=False, default=0)
    total_transactions = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        # At most one active shift
        Index(
            "uq_shifts_single_active",
            "status",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

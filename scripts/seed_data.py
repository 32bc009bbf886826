"""
기본 데이터 시드 스크립트
충전 보너스 규칙과 기본 서비스 항목을 초기 데이터로 설정
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from barberapi.database.connection import SessionLocal
from barberapi.database.session import session_scope
from barberapi.models.recharge import RechargeRule
from barberapi.models.service_item import ServiceItem

# (충전 금액, 보너스)
DEFAULT_RULES = [
    (Decimal("100"), Decimal("10")),
    (Decimal("300"), Decimal("50")),
    (Decimal("500"), Decimal("100")),
]

# (이름, 가격)
DEFAULT_SERVICES = [
    ("洗剪吹", Decimal("38")),
    ("单剪", Decimal("28")),
    ("洗头", Decimal("15")),
    ("染发", Decimal("168")),
    ("烫发", Decimal("198")),
]


def seed_recharge_rules():
    """기본 충전 보너스 규칙 시드 (이미 있는 기준 금액은 건너뜀)"""
    try:
        with session_scope(SessionLocal) as db:
            for amount, bonus in DEFAULT_RULES:
                existing = (
                    db.query(RechargeRule)
                    .filter(RechargeRule.recharge_amount == amount)
                    .first()
                )
                if existing:
                    print(f"⏭️  이미 존재하는 규칙: 充 ¥{amount} 送 ¥{bonus}")
                    continue
                db.add(RechargeRule(recharge_amount=amount, bonus_amount=bonus, is_active=True))
                print(f"✅ 규칙 추가: 充 ¥{amount} 送 ¥{bonus}")
    except Exception as e:
        print(f"❌ 충전 규칙 시드 실패: {str(e)}")
        raise


def seed_service_items():
    """기본 서비스 항목 시드 (같은 이름이 있으면 건너뜀)"""
    try:
        with session_scope(SessionLocal) as db:
            for seq, (name, price) in enumerate(DEFAULT_SERVICES, start=1):
                existing = db.query(ServiceItem).filter(ServiceItem.name == name).first()
                if existing:
                    print(f"⏭️  이미 존재하는 서비스: {name}")
                    continue
                db.add(ServiceItem(name=name, price=price, sort_order=seq, is_active=True))
                print(f"✅ 서비스 추가: {name} ¥{price}")
    except Exception as e:
        print(f"❌ 서비스 항목 시드 실패: {str(e)}")
        raise


def main():
    """시드 데이터 실행"""
    print("🌱 시드 데이터 생성을 시작합니다...")
    print()

    print("💰 충전 규칙 시드 중...")
    seed_recharge_rules()
    print()

    print("✂️  서비스 항목 시드 중...")
    seed_service_items()
    print()

    print("🎉 모든 시드 데이터 생성이 완료되었습니다!")


if __name__ == "__main__":
    main()

"""
既定の地域・キーワード設定

外部の設定ファイルが与えられない場合に使用する地域一覧と
キーワード一覧です。
"""

from typing import List

from .models import Region

DEFAULT_REGIONS: List[Region] = [
    Region(
        province="서울특별시",
        districts=[
            "강남구", "강동구", "강북구", "강서구", "관악구", "광진구", "구로구",
            "금천구", "노원구", "도봉구", "동대문구", "동작구", "마포구", "서대문구",
            "서초구", "성동구", "성북구", "송파구", "양천구", "영등포구", "용산구",
            "은평구", "종로구", "중구", "중랑구",
        ],
    ),
    Region(
        province="경기도",
        districts=[
            "수원시", "성남시", "고양시", "용인시", "부천시", "안산시", "안양시",
            "남양주시", "화성시", "평택시", "의정부시", "시흥시", "파주시", "김포시",
            "광명시", "하남시",
        ],
    ),
    Region(province="인천광역시", districts=["남동구", "부평구", "서구", "연수구", "미추홀구"]),
    Region(province="부산광역시", districts=["해운대구", "부산진구", "동래구", "남구", "연제구"]),
    Region(province="대구광역시", districts=["중구", "수성구", "달서구", "북구"]),
    Region(province="대전광역시", districts=["서구", "유성구", "중구"]),
    Region(province="광주광역시", districts=["서구", "북구", "광산구"]),
]

DEFAULT_SELECTED_PROVINCES: List[str] = ["서울특별시"]

DEFAULT_KEYWORDS: List[str] = ["공유오피스", "비상주사무실", "소호사무실"]

DEFAULT_EXCLUDE_KEYWORDS: List[str] = [
    "비상주사무실소호사업자사무실공유오피스등록콜센터",
    "카페",
    "부동산",
    "공인중개사사무소",
    "창업센터",
    "파티룸",
    "연습실",
    "세미나",
    "패스트파이브",
]

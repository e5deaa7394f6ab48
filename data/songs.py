"""Starter song catalogue used to seed an empty database."""

from typing import List, Dict

SONGS: List[Dict] = [
    {
        'youtube_link': '9bZkp7q19f0',
        'song_name': 'Gangnam Style',
        'hangul_song_name': '강남스타일',
        'artist_name': 'PSY',
        'hangul_artist_name': '싸이',
        'artist_id': 1,
        'members': 'male',
        'publish_date': '2012-07-15',
        'views': 4900000000,
        'duration': 253.0,
        'artist_aliases': ['Psy'],
    },
    {
        'youtube_link': 'gdZLi9oWNZg',
        'song_name': 'Dynamite',
        'artist_name': 'BTS',
        'hangul_artist_name': '방탄소년단',
        'artist_id': 2,
        'members': 'male',
        'publish_date': '2020-08-21',
        'views': 1800000000,
        'duration': 223.0,
        'artist_aliases': ['Bangtan Boys', 'Bangtan Sonyeondan'],
    },
    {
        'youtube_link': 'MBdVXkSdhwU',
        'song_name': 'DNA',
        'artist_name': 'BTS',
        'hangul_artist_name': '방탄소년단',
        'artist_id': 2,
        'members': 'male',
        'publish_date': '2017-09-18',
        'views': 1700000000,
        'duration': 243.0,
        'artist_aliases': ['Bangtan Boys', 'Bangtan Sonyeondan'],
    },
    {
        'youtube_link': 'IHNzOHi8sJs',
        'song_name': 'DDU-DU DDU-DU',
        'hangul_song_name': '뚜두뚜두',
        'artist_name': 'BLACKPINK',
        'hangul_artist_name': '블랙핑크',
        'artist_id': 3,
        'members': 'female',
        'publish_date': '2018-06-15',
        'views': 2200000000,
        'duration': 216.0,
        'song_aliases': ['Ddu Du Ddu Du', 'Dududu'],
    },
    {
        'youtube_link': 'dyRsYk0LyA8',
        'song_name': 'Kill This Love',
        'artist_name': 'BLACKPINK',
        'hangul_artist_name': '블랙핑크',
        'artist_id': 3,
        'members': 'female',
        'publish_date': '2019-04-04',
        'views': 1900000000,
        'duration': 193.0,
    },
    {
        'youtube_link': 'ePpPVE-GGJw',
        'song_name': 'TT',
        'artist_name': 'TWICE',
        'hangul_artist_name': '트와이스',
        'artist_id': 4,
        'members': 'female',
        'publish_date': '2016-10-24',
        'views': 790000000,
        'duration': 214.0,
    },
    {
        'youtube_link': 'i0p1bmr0EmE',
        'song_name': 'What is Love?',
        'artist_name': 'TWICE',
        'hangul_artist_name': '트와이스',
        'artist_id': 4,
        'members': 'female',
        'publish_date': '2018-04-09',
        'views': 720000000,
        'duration': 208.0,
        'song_aliases': ['What is Love'],
    },
    {
        'youtube_link': 'uR8Mrt1IpXg',
        'song_name': 'Psycho',
        'artist_name': 'Red Velvet',
        'hangul_artist_name': '레드벨벳',
        'artist_id': 5,
        'members': 'female',
        'publish_date': '2019-12-23',
        'views': 410000000,
        'duration': 211.0,
    },
    {
        'youtube_link': 'J_CFBjAyPWE',
        'song_name': 'Red Flavor',
        'hangul_song_name': '빨간 맛',
        'artist_name': 'Red Velvet',
        'hangul_artist_name': '레드벨벳',
        'artist_id': 5,
        'members': 'female',
        'publish_date': '2017-07-09',
        'views': 300000000,
        'duration': 191.0,
        'song_aliases': ['Ppalgan Mat'],
    },
    {
        'youtube_link': 'eH9i_ziPxBk',
        'song_name': 'Fantastic Baby',
        'artist_name': 'BIGBANG',
        'hangul_artist_name': '빅뱅',
        'artist_id': 6,
        'members': 'male',
        'publish_date': '2012-03-06',
        'views': 500000000,
        'duration': 231.0,
        'artist_aliases': ['Big Bang'],
    },
    {
        'youtube_link': 'z8Eu-Dl1Lgk',
        'song_name': 'Growl',
        'hangul_song_name': '으르렁',
        'artist_name': 'EXO',
        'hangul_artist_name': '엑소',
        'artist_id': 7,
        'members': 'male',
        'publish_date': '2013-08-01',
        'views': 240000000,
        'duration': 229.0,
    },
    {
        'youtube_link': 'PSQYiKHrC8Q',
        'song_name': 'Gee',
        'artist_name': "Girls' Generation",
        'hangul_artist_name': '소녀시대',
        'artist_id': 8,
        'members': 'female',
        'publish_date': '2009-01-07',
        'views': 270000000,
        'duration': 200.0,
        'artist_aliases': ['SNSD', 'Girls Generation'],
    },
    {
        'youtube_link': 'CM4CkVFmTds',
        'song_name': 'I Am The Best',
        'hangul_song_name': '내가 제일 잘 나가',
        'artist_name': '2NE1',
        'hangul_artist_name': '투애니원',
        'artist_id': 9,
        'members': 'female',
        'publish_date': '2011-06-24',
        'views': 420000000,
        'duration': 209.0,
        'song_aliases': ['Naega Jeil Jal Naga'],
    },
    {
        'youtube_link': 'f5_wn8mexmM',
        'song_name': 'Dalla Dalla',
        'hangul_song_name': '달라달라',
        'artist_name': 'ITZY',
        'hangul_artist_name': '있지',
        'artist_id': 10,
        'members': 'female',
        'publish_date': '2019-02-11',
        'views': 370000000,
        'duration': 199.0,
        'song_aliases': ['Dalla Dalla'],
    },
    {
        'youtube_link': 'oqLL4ZrzwNU',
        'song_name': 'Bang Bang Bang',
        'hangul_song_name': '뱅뱅뱅',
        'artist_name': 'BIGBANG',
        'hangul_artist_name': '빅뱅',
        'artist_id': 6,
        'members': 'male',
        'publish_date': '2015-05-31',
        'views': 480000000,
        'duration': 222.0,
        'artist_aliases': ['Big Bang'],
    },
    {
        'youtube_link': 'WPdWvnAAurg',
        'song_name': 'Russian Roulette',
        'hangul_song_name': '러시안 룰렛',
        'artist_name': 'Red Velvet',
        'hangul_artist_name': '레드벨벳',
        'artist_id': 5,
        'members': 'female',
        'publish_date': '2016-09-07',
        'views': 220000000,
        'duration': 211.0,
    },
    {
        'youtube_link': 'KhTeiaCezwM',
        'song_name': 'Roller Coaster',
        'artist_name': 'Chungha',
        'hangul_artist_name': '청하',
        'artist_id': 11,
        'members': 'female',
        'publish_date': '2018-01-17',
        'views': 110000000,
        'duration': 203.0,
    },
    {
        'youtube_link': 'p1bjnyDqI9k',
        'song_name': 'Ring Ding Dong',
        'artist_name': 'SHINee',
        'hangul_artist_name': '샤이니',
        'artist_id': 12,
        'members': 'male',
        'publish_date': '2009-10-14',
        'views': 150000000,
        'duration': 215.0,
    },
    {
        'youtube_link': 'Z9OYR2p3Yfk',
        'song_name': 'Hola Hola',
        'artist_name': 'KARD',
        'hangul_artist_name': '카드',
        'artist_id': 13,
        'members': 'coed',
        'publish_date': '2017-07-19',
        'views': 60000000,
        'duration': 230.0,
    },
]

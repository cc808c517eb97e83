"""Sample data for demos and the public feed."""
from datetime import datetime

from modernbook.library import Library
from modernbook.models.book import AudioSegment, Book
from modernbook.models.social import Clip, Edition

SAMPLE_BOOKS = [
    Book(
        id="1",
        title="Pride and Prejudice",
        author="Jane Austen",
        cover_color="#8B7355",
        cover_gradient="from-rose-400 via-pink-500 to-purple-500",
        uploaded_at=datetime(2024, 11, 1),
        status="audio-ready",
        original_text=(
            "It is a truth universally acknowledged, that a single man in possession "
            "of a good fortune, must be in want of a wife."
        ),
        modernized_text="Everyone knows that a wealthy single man must be looking for a wife.",
        audio_segments=[
            AudioSegment(id="seg-1", chunk_index=0, audio_url="sample-audio-1.mp3", duration=4.2),
        ],
    ),
    Book(
        id="2",
        title="Moby-Dick",
        author="Herman Melville",
        cover_color="#2C5F77",
        cover_gradient="from-blue-500 via-cyan-500 to-teal-400",
        uploaded_at=datetime(2024, 10, 28),
        status="modernized",
        original_text=(
            "Call me Ishmael. Some years ago—never mind how long precisely—having "
            "little or no money in my purse..."
        ),
        modernized_text="Call me Ishmael. A few years back, when I was broke and feeling restless...",
    ),
    Book(
        id="3",
        title="The Adventures of Sherlock Holmes",
        author="Arthur Conan Doyle",
        cover_color="#6B4423",
        cover_gradient="from-amber-400 via-orange-500 to-red-500",
        uploaded_at=datetime(2024, 10, 15),
        status="uploaded",
    ),
]

SAMPLE_EDITIONS = [
    Edition(
        id="e1",
        book_id="1",
        user_id="me",
        user_handle="you",
        title="Pride and Prejudice",
        author="Jane Austen",
        summary="A fresh, modern take on Austen's timeless classic about love, class, and first impressions.",
        tags=["romance", "classic", "witty"],
        cover_gradient="from-rose-400 via-pink-500 to-purple-500",
        listens=1247,
        likes=89,
        created_at=datetime(2024, 11, 2),
        modernized_text="Everyone knows that a wealthy single man must be looking for a wife.",
    ),
    Edition(
        id="pe1",
        book_id="x1",
        user_id="u1",
        user_handle="@classicreader",
        title="Dracula",
        author="Bram Stoker",
        summary="The iconic vampire story, reimagined with contemporary language while keeping all the gothic atmosphere.",
        tags=["horror", "gothic", "vampire"],
        cover_gradient="from-red-500 via-rose-600 to-purple-700",
        listens=3421,
        likes=234,
        created_at=datetime(2024, 10, 20),
    ),
    Edition(
        id="pe2",
        book_id="x2",
        user_id="u2",
        user_handle="@modernclassics",
        title="The Picture of Dorian Gray",
        author="Oscar Wilde",
        summary="Wilde's masterpiece about beauty, morality, and corruption - now accessible to modern ears.",
        tags=["philosophy", "gothic", "aesthetic"],
        cover_gradient="from-violet-500 via-purple-500 to-indigo-600",
        listens=2156,
        likes=178,
        created_at=datetime(2024, 10, 18),
    ),
    Edition(
        id="pe3",
        book_id="x3",
        user_id="u3",
        user_handle="@audiophile",
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        summary="Jazz Age glamour and tragedy, retold for today's listener with crystal-clear language.",
        tags=["classic", "american", "1920s"],
        cover_gradient="from-amber-400 via-yellow-500 to-orange-500",
        listens=5234,
        likes=412,
        created_at=datetime(2024, 10, 15),
    ),
]

SAMPLE_CLIPS = [
    Clip(
        id="c1",
        edition_id="pe1",
        user_id="u1",
        user_handle="@classicreader",
        title="Opening Line",
        book_title="Dracula",
        quote_text="I must record everything. No detail is too small when the threat is this ancient.",
        audio_url="sample-clip-1.mp3",
        start_time=0,
        end_time=8,
        duration=8,
        tags=["iconic", "horror"],
        likes=456,
        shares=89,
        cover_gradient="from-red-500 via-rose-600 to-purple-700",
        created_at=datetime(2024, 11, 3),
    ),
    Clip(
        id="c2",
        edition_id="pe3",
        user_id="u3",
        user_handle="@audiophile",
        title="Green Light",
        book_title="The Great Gatsby",
        quote_text="So we keep pushing forward, fighting against the current, always pulled back to where we started.",
        audio_url="sample-clip-2.mp3",
        start_time=0,
        end_time=6,
        duration=6,
        tags=["philosophy", "poetic"],
        likes=892,
        shares=167,
        cover_gradient="from-amber-400 via-yellow-500 to-orange-500",
        created_at=datetime(2024, 11, 2),
    ),
]


def seed_library(library: Library | None = None) -> Library:
    """Fill a library with copies of the sample records."""
    library = library or Library()
    library.books.extend(b.model_copy(deep=True) for b in SAMPLE_BOOKS)
    library.editions.extend(e.model_copy(deep=True) for e in SAMPLE_EDITIONS)
    library.clips.extend(c.model_copy(deep=True) for c in SAMPLE_CLIPS)
    return library

# cli/commands/db.py
import click
from core.sa.database import Database
from core.sa.repositories import BookRepository

# Sample academic catalog used for local development
SAMPLE_BOOKS = [
    dict(title="Introduction to Algorithms", author="Thomas H. Cormen, Charles E. Leiserson", publisher="MIT Press",
         isbn="978-0262033848", publication_year=2009, type="book", access_type="both",
         tags=["algorithms", "computer science", "data structures"], topics=["Computer Science", "Mathematics"],
         total_copies=5, available_copies=5, requires_approval=False, max_borrow_days=21),
    dict(title="Clean Code: A Handbook of Agile Software Craftsmanship", author="Robert C. Martin",
         publisher="Prentice Hall", isbn="978-0132350884", publication_year=2008, type="book",
         access_type="physical_only", tags=["programming", "software engineering", "best practices"],
         topics=["Computer Science", "Software Engineering"],
         total_copies=3, available_copies=3, requires_approval=False, max_borrow_days=14),
    dict(title="The Structure of Scientific Revolutions", author="Thomas S. Kuhn",
         publisher="University of Chicago Press", isbn="978-0226458083", publication_year=2012, type="book",
         access_type="both", tags=["philosophy", "science", "history"], topics=["Philosophy", "History of Science"],
         total_copies=4, available_copies=4, requires_approval=False, max_borrow_days=21),
    dict(title="Principles of Economics", author="N. Gregory Mankiw", publisher="Cengage Learning",
         isbn="978-1305585126", publication_year=2017, type="book", access_type="physical_only",
         tags=["economics", "microeconomics", "macroeconomics"], topics=["Economics", "Business"],
         total_copies=8, available_copies=8, requires_approval=False, max_borrow_days=14),
    dict(title="The Art of Computer Programming, Vol. 1", author="Donald E. Knuth", publisher="Addison-Wesley",
         isbn="978-0201896831", publication_year=1997, type="book", access_type="online_only",
         tags=["algorithms", "computer science", "programming"], topics=["Computer Science", "Mathematics"],
         total_copies=2, available_copies=2, requires_approval=True, max_borrow_days=30),
    dict(title="Nature: International Journal of Science", author="Nature Publishing Group",
         publisher="Springer Nature", isbn=None, publication_year=2024, type="journal", access_type="online_only",
         tags=["science", "research", "peer-reviewed"], topics=["Science", "Research"],
         total_copies=1, available_copies=1, requires_approval=False, max_borrow_days=7),
    dict(title="Harvard Business Review", author="Harvard Business Publishing",
         publisher="Harvard Business School", isbn=None, publication_year=2024, type="magazine", access_type="both",
         tags=["business", "management", "leadership"], topics=["Business", "Management"],
         total_copies=12, available_copies=12, requires_approval=False, max_borrow_days=7),
    dict(title="Deep Learning Research Papers Collection", author="Various Authors", publisher="Academic Press",
         isbn=None, publication_year=2023, type="research_paper", access_type="online_only",
         tags=["deep learning", "neural networks", "AI"], topics=["Computer Science", "Artificial Intelligence"],
         total_copies=1, available_copies=1, requires_approval=True, max_borrow_days=14),
    dict(title="Modern Database Management", author="Jeffrey A. Hoffer", publisher="Pearson",
         isbn="978-0134773650", publication_year=2018, type="book", access_type="physical_only",
         tags=["database", "SQL", "information systems"], topics=["Computer Science", "Information Systems"],
         total_copies=5, available_copies=5, requires_approval=False, max_borrow_days=14),
]

@click.group()
def db():
    """Database management commands"""
    pass

@db.command()
@click.option('--drop/--no-drop', default=False, help='Drop all tables before creating them')
def init(drop: bool):
    """Create the schema in the database named by DATABASE_URL"""
    database = Database()
    if drop:
        database.drop_db()
        click.echo(click.style("Dropped existing tables", fg='yellow'))
    database.init_db()
    click.echo(click.style("Schema ready", fg='green'))

@db.command()
def seed():
    """Load the sample catalog, skipping titles already present"""
    database = Database()
    database.init_db()
    created = 0
    with database.get_db() as session:
        repo = BookRepository(session)
        for data in SAMPLE_BOOKS:
            if data["isbn"] and repo.get_by_isbn(data["isbn"]):
                continue
            if not data["isbn"] and repo.count_books(data["title"]):
                continue
            repo.create_book(**data)
            created += 1
    click.echo(click.style("Seeded: ", fg='blue') + click.style(str(created), fg='green') +
               click.style(" books", fg='blue'))

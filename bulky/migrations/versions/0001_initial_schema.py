"""initial_schema: auth, wilayah, catalog, produk, pesanan, kupon, ulasan, content

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Catalog master kinds share nama/slug/deskripsi/is_active and soft delete
MASTER_TABLES = (
    'kategori_produk', 'tipe_produk', 'merek_produk', 'kondisi_produk',
    'kondisi_paket', 'sumber_produk', 'warehouse',
)


def _master_extra_columns(table: str):
    if table == 'kategori_produk':
        return (sa.Column('icon_url', sa.String(500), nullable=True),)
    if table == 'merek_produk':
        return (sa.Column('logo_url', sa.String(500), nullable=True),)
    if table in ('tipe_produk', 'kondisi_produk', 'kondisi_paket'):
        return (sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),)
    if table == 'warehouse':
        return (
            sa.Column('alamat', sa.Text(), nullable=True),
            sa.Column('kota', sa.String(100), nullable=True),
            sa.Column('telepon', sa.String(20), nullable=True),
        )
    return ()


def _timestamps():
    return (
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def upgrade() -> None:
    # --- auth ---
    op.create_table(
        'permission',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kode', sa.String(100), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('modul', sa.String(50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_table(
        'role',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kode', sa.String(50), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_table(
        'role_permission',
        sa.Column('role_id', sa.Uuid(), nullable=False),
        sa.Column('permission_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['role.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permission.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id', 'permission_id'),
    )
    op.create_table(
        'admin',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('role_id', sa.Uuid(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['role_id'], ['role.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_email', 'admin', ['email'], unique=False)
    op.create_table(
        'buyer',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('telepon', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_buyer_email', 'buyer', ['email'], unique=False)
    op.create_index('ix_buyer_username', 'buyer', ['username'], unique=False)
    op.create_table(
        'refresh_token',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_type', sa.String(10), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.String(64), nullable=False),
        sa.Column('device_info', sa.String(255), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('expired_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token'),
    )
    op.create_index('ix_refresh_token_user', 'refresh_token', ['user_type', 'user_id'], unique=False)
    op.create_table(
        'activity_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_type', sa.String(10), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('modul', sa.String(50), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_log_user', 'activity_log', ['user_type', 'user_id'], unique=False)
    op.create_index('ix_activity_log_created_at', 'activity_log', ['created_at'], unique=False)

    # --- wilayah ---
    op.create_table(
        'provinsi',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('kode', sa.String(10), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_table(
        'kota',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('provinsi_id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('kode', sa.String(10), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['provinsi_id'], ['provinsi.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_index('ix_kota_provinsi_id', 'kota', ['provinsi_id'], unique=False)
    op.create_table(
        'kecamatan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kota_id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('kode', sa.String(10), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['kota_id'], ['kota.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_index('ix_kecamatan_kota_id', 'kecamatan', ['kota_id'], unique=False)
    op.create_table(
        'kelurahan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kecamatan_id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('kode', sa.String(15), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['kecamatan_id'], ['kecamatan.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_index('ix_kelurahan_kecamatan_id', 'kelurahan', ['kecamatan_id'], unique=False)
    op.create_table(
        'alamat_buyer',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('kelurahan_id', sa.Uuid(), nullable=False),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column('nama_penerima', sa.String(100), nullable=False),
        sa.Column('telepon_penerima', sa.String(20), nullable=False),
        sa.Column('kode_pos', sa.String(10), nullable=False),
        sa.Column('alamat_lengkap', sa.String(500), nullable=False),
        sa.Column('catatan', sa.String(500), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['kelurahan_id'], ['kelurahan.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_alamat_buyer_buyer_id', 'alamat_buyer', ['buyer_id'], unique=False)

    # --- catalog master data ---
    for table in MASTER_TABLES:
        op.create_table(
            table,
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('nama', sa.String(100), nullable=False),
            sa.Column('slug', sa.String(120), nullable=False),
            sa.Column('deskripsi', sa.Text(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
            *_master_extra_columns(table),
            *_timestamps(),
            sa.Column('deleted_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(f'ix_{table}_slug', table, ['slug'], unique=False)

    # --- produk ---
    op.create_table(
        'produk',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(300), nullable=False),
        sa.Column('id_cargo', sa.String(50), nullable=True),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('kategori_id', sa.Uuid(), nullable=False),
        sa.Column('tipe_produk_id', sa.Uuid(), nullable=False),
        sa.Column('kondisi_id', sa.Uuid(), nullable=False),
        sa.Column('kondisi_paket_id', sa.Uuid(), nullable=False),
        sa.Column('sumber_id', sa.Uuid(), nullable=True),
        sa.Column('warehouse_id', sa.Uuid(), nullable=False),
        sa.Column('harga_sebelum_diskon', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('persentase_diskon', sa.DECIMAL(5, 2), nullable=False, server_default='0'),
        sa.Column('harga_sesudah_diskon', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('quantity_terjual', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('discrepancy', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['kategori_id'], ['kategori_produk.id']),
        sa.ForeignKeyConstraint(['tipe_produk_id'], ['tipe_produk.id']),
        sa.ForeignKeyConstraint(['kondisi_id'], ['kondisi_produk.id']),
        sa.ForeignKeyConstraint(['kondisi_paket_id'], ['kondisi_paket.id']),
        sa.ForeignKeyConstraint(['sumber_id'], ['sumber_produk.id']),
        sa.ForeignKeyConstraint(['warehouse_id'], ['warehouse.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_produk_slug', 'produk', ['slug'], unique=False)
    op.create_index('ix_produk_id_cargo', 'produk', ['id_cargo'], unique=False)
    op.create_index('ix_produk_kategori_id', 'produk', ['kategori_id'], unique=False)
    op.create_index('ix_produk_warehouse_id', 'produk', ['warehouse_id'], unique=False)
    op.create_index('ix_produk_active_created', 'produk', ['is_active', 'created_at'], unique=False)
    op.create_table(
        'produk_merek',
        sa.Column('produk_id', sa.Uuid(), nullable=False),
        sa.Column('merek_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['produk_id'], ['produk.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['merek_id'], ['merek_produk.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('produk_id', 'merek_id'),
    )
    op.create_table(
        'produk_gambar',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('produk_id', sa.Uuid(), nullable=False),
        sa.Column('gambar_url', sa.String(500), nullable=False),
        sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['produk_id'], ['produk.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_produk_gambar_produk_id', 'produk_gambar', ['produk_id'], unique=False)

    # --- pesanan ---
    op.create_table(
        'pesanan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kode', sa.String(30), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('delivery_type', sa.String(20), nullable=False),
        sa.Column('alamat_buyer_id', sa.Uuid(), nullable=True),
        sa.Column('payment_type', sa.String(20), nullable=False, server_default='REGULAR'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('order_status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('biaya_produk', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('biaya_pengiriman', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('biaya_ppn', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('biaya_lainnya', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('catatan', sa.Text(), nullable=True),
        sa.Column('catatan_admin', sa.Text(), nullable=True),
        sa.Column('expired_at', sa.DateTime(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('ready_at', sa.DateTime(), nullable=True),
        sa.Column('shipped_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_reason', sa.Text(), nullable=True),
        sa.Column('deliveree_booking_id', sa.String(100), nullable=True),
        sa.Column('forwarder_tracking_no', sa.String(100), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.ForeignKeyConstraint(['alamat_buyer_id'], ['alamat_buyer.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('kode'),
    )
    op.create_index('ix_pesanan_buyer_id', 'pesanan', ['buyer_id'], unique=False)
    op.create_index('ix_pesanan_order_status', 'pesanan', ['order_status'], unique=False)
    op.create_index('ix_pesanan_payment_status', 'pesanan', ['payment_status'], unique=False)
    op.create_index('ix_pesanan_created_at', 'pesanan', ['created_at'], unique=False)
    op.create_table(
        'pesanan_item',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_id', sa.Uuid(), nullable=False),
        sa.Column('produk_id', sa.Uuid(), nullable=False),
        sa.Column('nama_produk', sa.String(255), nullable=False),
        sa.Column('sku', sa.String(50), nullable=True),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('harga_satuan', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('diskon_satuan', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('subtotal', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['pesanan_id'], ['pesanan.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['produk_id'], ['produk.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pesanan_item_pesanan_id', 'pesanan_item', ['pesanan_id'], unique=False)
    op.create_table(
        'pesanan_pembayaran',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('metode_pembayaran', sa.String(50), nullable=True),
        sa.Column('jumlah', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['pesanan_id'], ['pesanan.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_pesanan_pembayaran_pesanan_id', 'pesanan_pembayaran', ['pesanan_id'], unique=False)
    op.create_table(
        'pesanan_status_history',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_id', sa.Uuid(), nullable=False),
        sa.Column('status_from', sa.String(20), nullable=True),
        sa.Column('status_to', sa.String(20), nullable=False),
        sa.Column('status_type', sa.String(10), nullable=False),
        sa.Column('changed_by', sa.Uuid(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['pesanan_id'], ['pesanan.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['changed_by'], ['admin.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_pesanan_status_history_pesanan_id', 'pesanan_status_history', ['pesanan_id'], unique=False
    )

    # --- kupon ---
    op.create_table(
        'kupon',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kode', sa.String(50), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('deskripsi', sa.Text(), nullable=True),
        sa.Column('jenis_diskon', sa.String(20), nullable=False),
        sa.Column('nilai_diskon', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('minimal_pembelian', sa.DECIMAL(15, 2), nullable=False, server_default='0'),
        sa.Column('limit_pemakaian', sa.Integer(), nullable=True),
        sa.Column('tanggal_kedaluarsa', sa.Date(), nullable=False),
        sa.Column('is_all_kategori', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_kupon_kode', 'kupon', ['kode'], unique=False)
    op.create_index('ix_kupon_tanggal_kedaluarsa', 'kupon', ['tanggal_kedaluarsa'], unique=False)
    op.create_table(
        'kupon_kategori',
        sa.Column('kupon_id', sa.Uuid(), nullable=False),
        sa.Column('kategori_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['kupon_id'], ['kupon.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['kategori_id'], ['kategori_produk.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('kupon_id', 'kategori_id'),
    )
    op.create_table(
        'kupon_usage',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kupon_id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_id', sa.Uuid(), nullable=False),
        sa.Column('kode_kupon', sa.String(50), nullable=False),
        sa.Column('nilai_potongan', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['kupon_id'], ['kupon.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.ForeignKeyConstraint(['pesanan_id'], ['pesanan.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_kupon_usage_kupon_id', 'kupon_usage', ['kupon_id'], unique=False)
    op.create_index('ix_kupon_usage_buyer_id', 'kupon_usage', ['buyer_id'], unique=False)

    # --- ulasan ---
    op.create_table(
        'ulasan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_id', sa.Uuid(), nullable=False),
        sa.Column('pesanan_item_id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.Uuid(), nullable=False),
        sa.Column('produk_id', sa.Uuid(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('komentar', sa.Text(), nullable=True),
        sa.Column('gambar', sa.String(500), nullable=True),
        sa.Column('is_approved', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['pesanan_id'], ['pesanan.id']),
        sa.ForeignKeyConstraint(['pesanan_item_id'], ['pesanan_item.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.ForeignKeyConstraint(['produk_id'], ['produk.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['admin.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pesanan_item_id'),
    )
    op.create_index('ix_ulasan_produk_approved', 'ulasan', ['produk_id', 'is_approved'], unique=False)
    op.create_index('ix_ulasan_buyer_id', 'ulasan', ['buyer_id'], unique=False)

    # --- content ---
    for table in ('kategori_blog', 'kategori_video'):
        op.create_table(
            table,
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('nama', sa.String(100), nullable=False),
            sa.Column('slug', sa.String(120), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
            sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),
            *_timestamps(),
            sa.Column('deleted_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
    op.create_table(
        'label_blog',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False),
        sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'blog',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('judul_id', sa.String(200), nullable=False),
        sa.Column('judul_en', sa.String(200), nullable=True),
        sa.Column('slug', sa.String(250), nullable=False),
        sa.Column('konten_id', sa.Text(), nullable=False),
        sa.Column('konten_en', sa.Text(), nullable=True),
        sa.Column('deskripsi_singkat_id', sa.String(500), nullable=False),
        sa.Column('deskripsi_singkat_en', sa.String(500), nullable=True),
        sa.Column('featured_image_url', sa.String(500), nullable=True),
        sa.Column('kategori_id', sa.Uuid(), nullable=False),
        sa.Column('meta_title_id', sa.String(200), nullable=True),
        sa.Column('meta_title_en', sa.String(200), nullable=True),
        sa.Column('meta_description_id', sa.String(300), nullable=True),
        sa.Column('meta_description_en', sa.String(300), nullable=True),
        sa.Column('meta_keywords', sa.String(300), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['kategori_id'], ['kategori_blog.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blog_slug', 'blog', ['slug'], unique=False)
    op.create_index('ix_blog_kategori_id', 'blog', ['kategori_id'], unique=False)
    op.create_table(
        'blog_label',
        sa.Column('blog_id', sa.Uuid(), nullable=False),
        sa.Column('label_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['blog_id'], ['blog.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['label_id'], ['label_blog.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('blog_id', 'label_id'),
    )
    op.create_table(
        'video',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('judul_id', sa.String(200), nullable=False),
        sa.Column('judul_en', sa.String(200), nullable=True),
        sa.Column('slug', sa.String(250), nullable=False),
        sa.Column('deskripsi_id', sa.Text(), nullable=True),
        sa.Column('deskripsi_en', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(500), nullable=False),
        sa.Column('thumbnail_url', sa.String(500), nullable=True),
        sa.Column('kategori_id', sa.Uuid(), nullable=False),
        sa.Column('durasi_detik', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['kategori_id'], ['kategori_video.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_video_slug', 'video', ['slug'], unique=False)
    op.create_index('ix_video_kategori_id', 'video', ['kategori_id'], unique=False)
    op.create_table(
        'banner_event_promo',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('nama', sa.String(100), nullable=False),
        sa.Column('gambar_url_id', sa.String(500), nullable=False),
        sa.Column('gambar_url_en', sa.String(500), nullable=True),
        sa.Column('tujuan', sa.JSON(), nullable=True),
        sa.Column('urutan', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('tanggal_mulai', sa.DateTime(), nullable=True),
        sa.Column('tanggal_selesai', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'faq',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('judul', sa.String(200), nullable=False),
        sa.Column('judul_en', sa.String(200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('items', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    for table in (
        'faq', 'banner_event_promo', 'video', 'blog_label', 'blog', 'label_blog',
        'kategori_video', 'kategori_blog', 'ulasan', 'kupon_usage', 'kupon_kategori', 'kupon',
        'pesanan_status_history', 'pesanan_pembayaran', 'pesanan_item', 'pesanan',
        'produk_gambar', 'produk_merek', 'produk',
    ):
        op.drop_table(table)
    for table in reversed(MASTER_TABLES):
        op.drop_table(table)
    for table in (
        'alamat_buyer', 'kelurahan', 'kecamatan', 'kota', 'provinsi',
        'activity_log', 'refresh_token', 'buyer', 'admin', 'role_permission', 'role', 'permission',
    ):
        op.drop_table(table)
